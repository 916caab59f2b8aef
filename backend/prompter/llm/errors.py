# prompter/llm/errors.py
class LLMError(Exception):
    """Base generation backend error (wrapped). str(e) is shown to the user."""

class LLMNotFoundError(LLMError):
    """Backend executable or credentials missing."""

class LLMNetworkError(LLMError):
    """Connection failures, HTTP error statuses."""

class LLMProcessError(LLMError):
    """CLI exited non-zero or reported an error."""

class LLMParseError(LLMError):
    """Malformed or empty backend response."""

class LLMTimeoutError(LLMError):
    """Call exceeded LLM_TIMEOUT_SECONDS."""
