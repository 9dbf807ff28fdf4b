"""
Selah Backend — Abstract LLM Service Interface
===============================================

What:  Abstract base class for the text-generation provider behind the
       optional AI annotator.
Why:   AnnotationService only needs "prompt in, text out"; keeping that
       behind an interface lets tests substitute a fake and lets the
       provider change without touching the annotator.
How:   Concrete implementations inherit from LLMService and implement
       generate() and health_check().
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Contract:
        - generate() accepts a prompt and returns the model's raw text answer
        - Implementations handle their own retry logic and error translation
        - Provider-specific errors are wrapped in LLMServiceError
          (or CircuitBreakerOpenError when the provider is being shielded)

    Implementations:
        - GeminiService: Google Gemini (default)
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Send one prompt and return the text of the answer.

        Returns:
            str: The model output, stripped. Empty string when the model
                 returned no text. Never None.

        Raises:
            LLMServiceError: The provider failed after all retries.
            CircuitBreakerOpenError: Too many recent consecutive failures.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Lightweight connectivity test (must not consume generation quota).

        Returns: True if the provider is reachable, False otherwise.
        """
        ...
