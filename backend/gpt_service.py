# gpt_service.py
import logging

import httpx

log = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a warm, thoughtful journaling companion. "
    "Be concise, kind, and specific. Never diagnose."
)

# Sections of the year review are separated by this marker so each one can
# go out as its own Telegram message.
SECTION_SEPARATOR = ">-----<"

# (max_tokens, temperature) per use case
MOOD_BUDGET = (10, 0.3)
SUMMARY_BUDGET = (300, 0.7)
ANALYSIS_BUDGET = (3000, 0.7)


class CompletionError(RuntimeError):
    """The language model call failed; nothing should be saved."""


class CompletionClient:
    def __init__(self, api_key: str, model: str, url: str, timeout: float = 30):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config["OPENAI_API_KEY"],
            model=config["OPENAI_MODEL"],
            url=config["OPENAI_API_URL"],
            timeout=config["HTTP_TIMEOUT"],
        )

    def complete(self, user_prompt: str, max_tokens: int, temperature: float) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(self.url, headers=headers, json=body)
                log.info("LLM status: %s", resp.status_code)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            log.error("LLM error response: %s", e.response.text[:800])
            raise CompletionError(f"completion failed with HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise CompletionError(f"completion request failed: {e}") from e

        return (data["choices"][0]["message"]["content"] or "").strip()

    def generate_mood(self, entry_text: str) -> str:
        """One or two words describing the mood of the entry."""
        prompt = (
            "Describe the overall mood of this journal entry in one or two words. "
            "Reply with the words only.\n\n"
            f"Entry:\n{entry_text}"
        )
        return clean_mood(self.complete(prompt, *MOOD_BUDGET))

    def generate_summary(self, entry_text: str) -> str:
        prompt = (
            "Summarize this journal entry in two or three warm sentences, "
            "written to the author in the second person.\n\n"
            f"Entry:\n{entry_text}"
        )
        return self.complete(prompt, *SUMMARY_BUDGET)

    def analyze_year(self, entries_block: str, year: int, question: str = "") -> str:
        """Year-in-review over all of a chat's entries for one calendar year."""
        ask = question or (
            "Give me a year in review: recurring themes, how my mood changed, "
            "highlights, hard moments, and one suggestion for next year."
        )
        prompt = (
            f"Here are my journal entries from {year}, oldest first:\n\n"
            f"{entries_block}\n\n"
            f"{ask}\n\n"
            "Use short sections and put a line containing only "
            f"{SECTION_SEPARATOR} between sections."
        )
        return self.complete(prompt, *ANALYSIS_BUDGET)


def clean_mood(raw: str) -> str:
    mood = raw.strip().strip("\"'`.!").strip()
    # Models sometimes prefix the answer, e.g. "Mood: calm"
    if ":" in mood:
        mood = mood.split(":", 1)[1].strip()
    return mood.lower() or "neutral"
