# Seed package init
"""
Selah Backend — Reference Content Seeding
==========================================

What:  Fills an empty database with the content every user shares:
       Bible verses, hymns, a public devotional book and daily devotionals.
How:   run_seed(session) checks each table before inserting, so it is safe
       to run on every startup (SEED_ON_STARTUP) and against a populated DB.
"""
