"""
default_templates.py
- Purpose: Built-in templates seeded into an empty template table.
- Names are the identity: a default deleted by name is re-added on next startup.
"""

DEFAULT_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("Code Review", "Review this code for best practices, potential bugs, and improvements:"),
    ("Explain Code", "Explain what this code does in clear, simple terms:"),
    ("Debug Help", "Help me debug this issue:"),
    ("Quick Fix", "Fix this code with minimal changes:"),
    ("Refactor", "Refactor this to be more concise and readable:"),
    ("Architecture", "Suggest architectural improvements for:"),
    ("Best Practices", "What are the best practices for:"),
    ("Write Tests", "Write unit tests for this code:"),
    (
        "Business Research",
        "Research and analyze the following business topic, including market trends, "
        "competitors, and strategic insights:",
    ),
    (
        "Technical Research",
        "Research the following technical topic, including documentation, "
        "implementation patterns, and best practices:",
    ),
)
