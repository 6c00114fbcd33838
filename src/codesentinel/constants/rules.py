"""Rule field limits, defaults and composition constants."""

from __future__ import annotations

from codesentinel.types import RuleCategory

MAX_TITLE_LENGTH: int = 100
MAX_DESCRIPTION_LENGTH: int = 1000
MAX_BODY_LENGTH: int = 10000

MASTER_RULE_ORDER: int = 0
DEFAULT_CATEGORY: RuleCategory = "security"

VALID_CATEGORIES: frozenset[str] = frozenset(
    {"security", "performance", "code-quality", "best-practices", "architectural"}
)

VALID_LANGUAGES: frozenset[str] = frozenset(
    {
        "javascript",
        "typescript",
        "python",
        "php",
        "java",
        "csharp",
        "cpp",
        "go",
        "rust",
        "ruby",
        "sql",
        "html",
        "css",
        "kotlin",
        "swift",
        "objective-c",
    }
)

RULE_SEPARATOR: str = "\n\n---\n\n"
DEFAULT_MAX_PROMPT_CHARS: int = 12000

MASTER_RULE_TITLE: str = "Comprehensive Code Evaluation"
MASTER_RULE_DESCRIPTION: str = "Baseline evaluation criteria applied to every scan."
MASTER_RULE_BODY: str = """\
Review the code unit as a security engineer and report every concrete issue.
Evaluate at least the following:
1. Injection: SQL, NoSQL, OS command, LDAP and template injection.
2. Cross-site scripting and unsafe HTML rendering.
3. Authentication and session handling weaknesses.
4. Missing or broken authorization checks.
5. Hard-coded secrets, keys, tokens and credentials.
6. Weak or misused cryptography and insecure randomness.
7. Unsafe deserialization and dynamic code execution (eval, exec, Function).
8. Path traversal and unsafe file handling.
9. Server-side request forgery and unvalidated redirects.
10. Sensitive data exposure in logs, errors and responses.
11. Insecure configuration, debug flags and permissive CORS.
12. Vulnerable or unpinned dependencies referenced by the code.
13. Race conditions and unsafe shared state.
14. Missing input validation and output encoding.
For each issue give the file path, line, severity (critical, high, medium,
low or info), a short title and a description of the risk."""
