"""
Prompt templates for session scoring and the chat relay.
No external dependencies - simple string formatting with validation.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class PromptTemplate:
    """Single-text template with variable injection"""
    name: str
    text: str

    def render(self, **kwargs) -> str:
        """Format the template with provided variables"""
        try:
            return self.text.format(**kwargs)
        except KeyError as e:
            raise ValueError(f"Missing required template variable: {e}")


# --- SCORING TEMPLATES ---
# Both expect {features}: the JSON-encoded session summary.
# The reply contract is fixed: one JSON object with "score" and "reasons".

FAIRNESS_SCORING = PromptTemplate(
    name="fairness",
    text="""
You are an expert at detecting use of AI or external sources in a coding session.
Do NOT assess whether it is human; instead, focus on fair play and originality.

Given the following editor session features, return a JSON object:
- score: 0-100 (100 = completely fair, no external sources or AI used, 0 = highly suspicious)
- reasons: up to 5 bullet points explaining why, strictly flagging any copy-paste or external content

Scoring guidelines:
- External pasting or large paste events should decrease the score.
- Focus loss followed by large insertions is suspicious.
- Rapid or repetitive edits that suggest AI generation should lower the score.
- Normal typing and small edits without external pastes increase the score.

Features:
{features}
""",
)


HUMAN_LIKELIHOOD_SCORING = PromptTemplate(
    name="human_likelihood",
    text="""
You are an expert at analyzing typing behavior in a code editor.

Given the following session features, estimate how likely it is that a human typed this code.
Return ONLY a JSON object:
- score: 0-100 (100 = certainly human, 0 = certainly not human)
- reasons: up to 5 short bullet points explaining the score

Features:
{features}
""",
)


SCORING_TEMPLATES: Dict[str, PromptTemplate] = {
    FAIRNESS_SCORING.name: FAIRNESS_SCORING,
    HUMAN_LIKELIHOOD_SCORING.name: HUMAN_LIKELIHOOD_SCORING,
}


def get_scoring_template(name: str) -> PromptTemplate:
    """Look up a scoring template by name ("fairness" or "human_likelihood")."""
    try:
        return SCORING_TEMPLATES[name]
    except KeyError:
        raise ValueError(
            f"Unknown scoring template: {name!r}. "
            f"Expected one of: {', '.join(sorted(SCORING_TEMPLATES))}"
        )


# --- CHAT RELAY ---

CHAT_RELAY = PromptTemplate(
    name="chat_relay",
    text="""
You are Keyllama, an AI assistant helping a user with coding.
Current session stats:
Total edits: {total_edits},
Chars inserted: {chars_inserted},
Chars deleted: {chars_deleted},
External pastes: {external_pastes}

User says: "{message}"
""",
)


CHAT_ERROR_RESPONSE = "Error: could not get AI response"
