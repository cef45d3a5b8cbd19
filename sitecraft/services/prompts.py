"""Prompt templates and conversation messages used by the revision workflow.

Pure data plus two formatting helpers. No runtime logic.
"""

# ---------------------------------------------------------------------------
# System instructions
# ---------------------------------------------------------------------------

ENHANCE_SYSTEM_PROMPT = """You are a prompt enhancement specialist. The user wants to make changes to their website. Enhance their request to be more specific and actionable for a web developer.

Enhance this by:
1. Being specific about what elements to change
2. Mentioning design details (colors, spacing, sizes)
3. Clarifying the desired outcome
4. Using clear technical terms

Return ONLY the enhanced request, nothing else. Keep it concise (1-2 sentences)."""

CODE_SYSTEM_PROMPT = """You are an expert web developer.

CRITICAL REQUIREMENTS:
- Return ONLY the complete updated HTML code with the requested changes.
- Use Tailwind CSS for ALL styling (NO custom CSS).
- Use Tailwind utility classes for all styling changes.
- Include all JavaScript in <script> tags before closing </body>
- Make sure it's a complete, standalone HTML document with Tailwind CSS
- Return the HTML Code Only, nothing else

Apply the requested changes while maintaining the Tailwind CSS styling approach."""


def enhance_user_prompt(instruction: str) -> str:
    return f'user request: "{instruction}"'


def code_user_prompt(current_code: str, instruction: str) -> str:
    """The full current code travels on every call; there is no diffing."""
    return (
        f'Here is the current HTML code of the website: "{current_code}" '
        f'The user wants this change: "{instruction}"'
    )


# ---------------------------------------------------------------------------
# Assistant turns written to the conversation log
# ---------------------------------------------------------------------------

VERSION_DESCRIPTION = "changes made"

MSG_ENHANCED = 'I\'ve enhanced your prompt to: "{prompt}"'
MSG_GENERATING = "Now making changes to your website..."
MSG_SUCCESS = "Changes have been made to your website. Check out the new version!"
MSG_FAILURE = "Unable to generate the code, please try again"
MSG_ROLLBACK = "I've rolled back your website to selected version. You can preview it now."

# Response bodies
RESPONSE_REVISION_OK = "Changes made successfully"
RESPONSE_ROLLBACK_OK = "Rollback successful"
