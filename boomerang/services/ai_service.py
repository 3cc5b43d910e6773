from openai import AsyncOpenAI, OpenAIError
import asyncio
import os
import logging
from dataclasses import dataclass
from typing import Optional
from datetime import datetime

from boomerang.services.action_schemas import ACTION_TOOLS
from boomerang.services.errors import AIUnavailable, NoActionableIntent
from boomerang.services.scheduling import local_now

logger = logging.getLogger(__name__)

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))
DEFAULT_BUSINESS_CONTEXT = os.getenv("DEFAULT_BUSINESS_CONTEXT", "Small service business")


@dataclass(frozen=True)
class ActionCall:
    """One function call as returned by the model. Arguments are still raw JSON."""
    name: str
    arguments: str
    call_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"id": self.call_id, "name": self.name, "arguments": self.arguments}


def build_system_prompt(business_context: str, now: datetime) -> str:
    return f"""
    You are the back-office assistant for a service business: {business_context}.

    The owner dictates short voice notes between jobs. Turn each note into the
    concrete actions it implies by calling the provided functions.

    TODAY: {now.strftime("%A %Y-%m-%d %H:%M")}

    RULES:
    1. Call at least one function. Call several when the note implies several
       actions ("finished the kitchen job" can mean a thank-you email AND an
       invoice reminder).
    2. "Remind me to ..." and personal to-dos are create_reminder.
    3. Messages to clients are written in the owner's voice, friendly and short,
       ready to send without editing.
    4. Use contact names exactly as spoken. Never invent phone numbers or emails.
    5. Pick timing by urgency: immediate for urgent, end_of_day for same-day
       follow-ups, tomorrow for most tasks, next_week for later check-ins.
    """


class AIService:
    def __init__(self):
        self.api_key = os.getenv("OPENAI_API_KEY")
        self.model = OPENAI_MODEL
        self.client = None
        if self.api_key:
            self.client = AsyncOpenAI(api_key=self.api_key, max_retries=1)

    async def propose_actions(
        self,
        transcription: str,
        business_context: Optional[str] = None,
        timeout: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> list[ActionCall]:
        """Ask the model for the function calls implied by a transcription.

        Raises AIUnavailable when the client is missing, the call errors or the
        timeout elapses, and NoActionableIntent when no call comes back.
        """
        if not self.client:
            raise AIUnavailable("OpenAI client not initialized")

        timeout = AI_TIMEOUT_SECONDS if timeout is None else timeout
        system_prompt = build_system_prompt(business_context or DEFAULT_BUSINESS_CONTEXT, now or local_now())

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": f'Transcription: "{transcription}"'}
                    ],
                    tools=ACTION_TOOLS,
                    tool_choice="required",
                    parallel_tool_calls=True,
                    temperature=0.4,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise AIUnavailable(f"Model call timed out after {timeout}s") from e
        except OpenAIError as e:
            raise AIUnavailable(f"Model call failed: {e}") from e

        if not response.choices:
            raise NoActionableIntent("Model returned no choices")

        tool_calls = response.choices[0].message.tool_calls or []
        calls = [
            ActionCall(name=tc.function.name, arguments=tc.function.arguments or "", call_id=tc.id)
            for tc in tool_calls
            if getattr(tc, "function", None) is not None
        ]
        if not calls:
            raise NoActionableIntent("Model returned no function calls")

        logger.info(f"Model proposed {len(calls)} action(s): {[c.name for c in calls]}")
        return calls


ai_service = AIService()
