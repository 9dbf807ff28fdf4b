"""Built-in seed content used when no external Bible/hymn source is configured."""

from typing import Any, Dict, List

# Numeric book ids (1-66) used by common Bible SQLite exports
BOOK_NAMES: Dict[int, str] = {
    1: "Genesis", 2: "Exodus", 3: "Leviticus", 4: "Numbers", 5: "Deuteronomy",
    6: "Joshua", 7: "Judges", 8: "Ruth", 9: "1 Samuel", 10: "2 Samuel",
    11: "1 Kings", 12: "2 Kings", 13: "1 Chronicles", 14: "2 Chronicles",
    15: "Ezra", 16: "Nehemiah", 17: "Esther", 18: "Job", 19: "Psalms",
    20: "Proverbs", 21: "Ecclesiastes", 22: "Song of Solomon", 23: "Isaiah",
    24: "Jeremiah", 25: "Lamentations", 26: "Ezekiel", 27: "Daniel",
    28: "Hosea", 29: "Joel", 30: "Amos", 31: "Obadiah", 32: "Jonah",
    33: "Micah", 34: "Nahum", 35: "Habakkuk", 36: "Zephaniah", 37: "Haggai",
    38: "Zechariah", 39: "Malachi", 40: "Matthew", 41: "Mark", 42: "Luke",
    43: "John", 44: "Acts", 45: "Romans", 46: "1 Corinthians", 47: "2 Corinthians",
    48: "Galatians", 49: "Ephesians", 50: "Philippians", 51: "Colossians",
    52: "1 Thessalonians", 53: "2 Thessalonians", 54: "1 Timothy", 55: "2 Timothy",
    56: "Titus", 57: "Philemon", 58: "Hebrews", 59: "James", 60: "1 Peter",
    61: "2 Peter", 62: "1 John", 63: "2 John", 64: "3 John", 65: "Jude", 66: "Revelation",
}

# (book, chapter, verse, text), KJV
SAMPLE_VERSES = [
    ("John", 3, 16, "For God so loved the world, that he gave his only begotten Son, that whosoever believeth in him should not perish, but have everlasting life."),
    ("John", 3, 17, "For God sent not his Son into the world to condemn the world; but that the world through him might be saved."),
    ("Psalms", 23, 1, "The LORD is my shepherd; I shall not want."),
    ("Psalms", 23, 2, "He maketh me to lie down in green pastures: he leadeth me beside the still waters."),
    ("Psalms", 23, 3, "He restoreth my soul: he leadeth me in the paths of righteousness for his name's sake."),
    ("Psalms", 23, 4, "Yea, though I walk through the valley of the shadow of death, I will fear no evil: for thou art with me; thy rod and thy staff they comfort me."),
    ("Psalms", 23, 5, "Thou preparest a table before me in the presence of mine enemies: thou anointest my head with oil; my cup runneth over."),
    ("Psalms", 23, 6, "Surely goodness and mercy shall follow me all the days of my life: and I will dwell in the house of the LORD for ever."),
    ("Proverbs", 3, 5, "Trust in the LORD with all thine heart; and lean not unto thine own understanding."),
    ("Proverbs", 3, 6, "In all thy ways acknowledge him, and he shall direct thy paths."),
]

SAMPLE_HYMNS: List[Dict[str, Any]] = [
    {
        "title": "Amazing Grace",
        "lyrics": (
            "Amazing grace, how sweet the sound\nThat saved a wretch like me!\n"
            "I once was lost but now am found,\nWas blind but now I see.\n\n"
            "'Twas grace that taught my heart to fear,\nAnd grace my fears relieved;\n"
            "How precious did that grace appear\nThe hour I first believed!"
        ),
        "composer": "John Newton",
        "year": 1779,
        "tags": ["grace", "faith", "classic"],
        "tune": "New Britain",
        "meter": "C.M.",
    },
    {
        "title": "How Great Thou Art",
        "lyrics": (
            "O Lord my God, when I in awesome wonder\nConsider all the worlds Thy hands have made,\n"
            "I see the stars, I hear the rolling thunder,\nThy power throughout the universe displayed.\n\n"
            "Then sings my soul, my Savior God, to Thee:\nHow great Thou art, how great Thou art!"
        ),
        "composer": "Carl Boberg",
        "year": 1885,
        "tags": ["praise", "worship", "creation"],
        "tune": None,
        "meter": None,
    },
    {
        "title": "Great Is Thy Faithfulness",
        "lyrics": (
            "Great is Thy faithfulness, O God my Father;\nThere is no shadow of turning with Thee;\n"
            "Thou changest not, Thy compassions, they fail not;\nAs Thou hast been, Thou forever wilt be.\n\n"
            "Great is Thy faithfulness!\nMorning by morning new mercies I see;\n"
            "All I have needed Thy hand hath provided;\nGreat is Thy faithfulness, Lord, unto me!"
        ),
        "composer": "Thomas Chisholm",
        "year": 1923,
        "tags": ["faithfulness", "praise", "classic"],
        "tune": None,
        "meter": None,
    },
]

SAMPLE_BOOK: Dict[str, Any] = {
    "title": "Morning and Evening",
    "author": "Charles Spurgeon",
    "description": (
        "A classic collection of daily devotionals offering spiritual "
        "nourishment for each morning and evening."
    ),
    "cover_color": "#2c4a6e",
    "chapters": [
        (
            "January 1 - Morning",
            '"They are new every morning: great is thy faithfulness." - Lamentations 3:23\n\n'
            "The Lord's compassions never fail. This is a blessed commencement for the new "
            "year. Let us rejoice that the mercy of God is not like a passing shower, but "
            "like the sunshine, always shining, always present.\n\n"
            "Yesterday's trials are passed, and with them, yesterday's grace was sufficient. "
            "Today brings new challenges, and behold, new mercies await us.",
        ),
        (
            "January 1 - Evening",
            '"We will be glad and rejoice in thee." - Song of Solomon 1:4\n\n'
            "The one theme of joy for the believer is their Lord. We shall not cease to be "
            "glad when we have exhausted all other sources of gladness, for we may rejoice "
            "in Christ forever.\n\n"
            'Let your evening prayer tonight be this: "Lord, may my joy in Thee increase '
            'throughout this coming year."',
        ),
        (
            "January 2 - Morning",
            '"Unto the upright there ariseth light in the darkness." - Psalm 112:4\n\n'
            "Darkness is often the path to light. The seed lies buried in the cold earth "
            "before it springs into life. The night comes before the dawn.\n\n"
            "Trust the One who holds both the darkness and the light in His hands. He knows "
            "exactly when to turn your night into day.",
        ),
    ],
}

DAILY_DEVOTIONALS: List[Dict[str, Any]] = [
    {
        "day_of_year": 1,
        "title": "A Fresh Start",
        "scripture_reference": "Lamentations 3:22-23",
        "scripture_text": (
            "It is of the LORD's mercies that we are not consumed, because his compassions "
            "fail not. They are new every morning: great is thy faithfulness."
        ),
        "reflection": (
            "Each new day brings fresh mercies from our heavenly Father. This new beginning "
            "is an invitation to leave behind yesterday's failures and embrace the grace "
            "that awaits."
        ),
        "prayer": (
            "Lord, thank You for Your new mercies this morning. Help me to receive Your "
            "grace with a grateful heart. Amen."
        ),
        "author": "Traditional",
    },
    {
        "day_of_year": 2,
        "title": "Walking in Trust",
        "scripture_reference": "Proverbs 3:5-6",
        "scripture_text": (
            "Trust in the LORD with all thine heart; and lean not unto thine own "
            "understanding. In all thy ways acknowledge him, and he shall direct thy paths."
        ),
        "reflection": (
            "True wisdom begins when we acknowledge our limitations and surrender our plans "
            "to God. When we trust Him completely, He promises to make our paths straight."
        ),
        "prayer": (
            "Father, I surrender my plans and understanding to You. Guide my steps today. Amen."
        ),
        "author": "Traditional",
    },
    {
        "day_of_year": 3,
        "title": "The Good Shepherd",
        "scripture_reference": "Psalm 23:1-3",
        "scripture_text": (
            "The LORD is my shepherd; I shall not want. He maketh me to lie down in green "
            "pastures: he leadeth me beside the still waters. He restoreth my soul."
        ),
        "reflection": (
            "God is our Good Shepherd who provides for all our needs, leads us to places of "
            "rest and restores our weary souls."
        ),
        "prayer": (
            "Good Shepherd, lead me today beside still waters. Restore my soul. Amen."
        ),
        "author": "Traditional",
    },
    {
        "day_of_year": 4,
        "title": "Strength in Weakness",
        "scripture_reference": "2 Corinthians 12:9",
        "scripture_text": (
            "And he said unto me, My grace is sufficient for thee: for my strength is made "
            "perfect in weakness."
        ),
        "reflection": (
            "When we acknowledge our weakness, we create space for God's power to flow "
            "through us. Our limitations are channels through which His strength is displayed."
        ),
        "prayer": (
            "Lord, I bring my weaknesses to You today. May Your strength be made perfect in me. Amen."
        ),
        "author": "Traditional",
    },
    {
        "day_of_year": 5,
        "title": "Perfect Peace",
        "scripture_reference": "Isaiah 26:3",
        "scripture_text": (
            "Thou wilt keep him in perfect peace, whose mind is stayed on thee: because he "
            "trusteth in thee."
        ),
        "reflection": (
            "Peace is not the absence of trouble but the presence of God in the midst of it. "
            "When our minds are fixed on God, peace floods our hearts."
        ),
        "prayer": (
            "Prince of Peace, help me to keep my mind fixed on You today. Amen."
        ),
        "author": "Traditional",
    },
]
