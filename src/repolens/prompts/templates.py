"""Prompt templates for repolens reviewers."""

# =============================================================================
# FILE REVIEW
# =============================================================================

FILE_REVIEW_SYSTEM_PROMPT = (
    "You are an expert code reviewer. Analyze code thoroughly and provide "
    "structured feedback in the exact JSON format requested."
)

FILE_REVIEW_PROMPT = """Analyze this {language} file and provide a comprehensive code review.

**File:** {file_path}
**Content:**
```{fence}
{content}
```

Please analyze for:
1. **Code Quality**: Best practices, readability, maintainability
2. **Security**: Vulnerabilities, security anti-patterns
3. **Performance**: Efficiency, optimization opportunities
4. **Bugs**: Potential runtime errors, logic issues
5. **Style**: Consistent formatting, naming conventions

Respond with ONLY a valid JSON object in this exact format:
{{
  "score": <number 0-100>,
  "complexity": "<low|medium|high>",
  "maintainability": <number 0-100>,
  "issues": [
    {{
      "line": <number or null>,
      "type": "<security|performance|quality|style|bug>",
      "severity": "<low|medium|high|critical>",
      "message": "<brief description>",
      "suggestion": "<how to fix>"
    }}
  ],
  "suggestions": [
    "<general improvement suggestion>"
  ]
}}

Focus on actionable feedback with specific line numbers where possible.
Prioritize critical security and bug issues; skip minor style preferences.
Do not wrap the JSON in markdown fences."""


# =============================================================================
# ISSUE REVIEW
# =============================================================================

ISSUE_REVIEW_SYSTEM_PROMPT = (
    "You are a senior engineer triaging GitHub issues against a codebase. "
    "Answer with a single JSON object and nothing else."
)

ISSUE_REVIEW_PROMPT = """Suggest concrete next steps for resolving this GitHub issue.

Issue #{number}: {title}
Labels: {labels}

{body}

Related code:
{code_context}

Respond with ONLY a valid JSON object in this exact format:
{{
  "estimatedEffort": "<low|medium|high>",
  "suggestions": [
    {{
      "type": "<code_change|new_file|documentation|testing|refactor>",
      "description": "<what to do>",
      "reasoning": "<why>",
      "filePath": "<path or null>",
      "lineNumber": <number or null>,
      "suggestedChange": "<code or null>"
    }}
  ]
}}"""

NO_CODE_CONTEXT = "(no related code found)"
