"""Active participation: operator-marked questions and spoken answers."""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from ..ai.base import Message
from ..context import AppContext
from ..models.events import Idle, Listening, QuestionState, TranscriptEvent
from ..transcription.listener import Listener
from ..ui.display import Tone, question_end_prompt, question_start_prompt, to_human
from ..ui.keyboard_input import OperatorInput
from .audio_service import AudioService
from .show_assistant import ShowAssistant

logger = logging.getLogger(__name__)


class CoHost:
    """Operator-driven question detection and answer generation.

    Pressing Enter while idle starts a question; every transcript event
    recognized at or after that moment is buffered. Pressing Enter again
    ends the question, and the buffered text is answered out loud. Events
    recognized before the start edge are ignored even if they are delivered
    late, so recognizer lag never leaks discussion into the question.
    """

    def __init__(self,
                 ctx: AppContext,
                 listener: Listener,
                 audio_service: AudioService,
                 operator: OperatorInput,
                 clock: Callable[[], float] = time.monotonic,
                 show_assistant: Optional[ShowAssistant] = None):
        self.ctx = ctx
        self.listener = listener
        self.audio_service = audio_service
        self.operator = operator
        self.clock = clock
        self.show_assistant = show_assistant
        self.state: QuestionState = Idle()

        self.input_timeout = float(ctx.config.get('co_host.input_timeout', 5))
        self.context_topics = int(ctx.config.get('co_host.context_topics', 10))
        self.context_characters = int(ctx.config.get('co_host.context_characters', 1000))
        self.model = ctx.config.get('openai.answer_model')

        listener.subscribe(self.handle_transcription)

    @property
    def listening(self) -> bool:
        return isinstance(self.state, Listening)

    def handle_transcription(self, event: TranscriptEvent) -> None:
        state = self.state
        if isinstance(state, Listening) and state.accepts(event):
            logger.info(f"Heard Question: {event.text}")
            state.buffer.append(event.text)

    def begin_question(self) -> None:
        """Idle -> Listening."""
        if self.listening:
            return
        self.state = Listening(started_at=self.clock())
        self.listener.suppress_echo()
        logger.debug("Listening for question")

    def end_question(self) -> str:
        """Listening -> Idle; returns the buffered question."""
        state = self.state
        if not isinstance(state, Listening):
            return ""
        self.state = Idle()
        self.listener.resume_echo()
        return state.question

    def on_operator_edge(self) -> Optional[str]:
        """Apply one Enter press. Returns the question when one just ended."""
        if self.listening:
            return self.end_question()
        self.begin_question()
        return None

    async def start(self) -> None:
        """Wait for operator edges until shutdown, answering each question in turn."""
        self.operator.start()
        self.ctx.console.print(question_start_prompt())

        while not self.ctx.shutting_down:
            line = await self._next_edge()
            if line is None:
                continue

            logger.debug("Input received...")
            question = self.on_operator_edge()
            if question is None:
                self.ctx.console.print(question_end_prompt())
                continue

            logger.info("End of question signal. Generating answer...")
            await self.answer_question(question)
            self.ctx.console.print(question_start_prompt())

        logger.debug("Shutdown: co-host question loop")

    def stop(self) -> None:
        self.ctx.request_shutdown()
        self.operator.stop()

    async def _next_edge(self) -> Optional[str]:
        # Wake on input or shutdown, whichever comes first, and at the latest
        # after input_timeout.
        line_task = asyncio.create_task(self.operator.next_line(self.input_timeout))
        shutdown_task = asyncio.create_task(self.ctx.shutdown.wait())
        done, pending = await asyncio.wait({line_task, shutdown_task},
                                           return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        if line_task in done:
            return line_task.result()
        return None

    async def answer_question(self, question: str) -> Optional[str]:
        """Answer a question out loud. Failures are logged, never raised."""
        if not question.strip():
            logger.info("No question was heard; nothing to answer")
            return None

        try:
            await self.ensure_summary()
            messages = self.answer_messages(question)
            logger.info(f"Answering question:\n{question}")
            answer = await self.ctx.backend.complete(messages, model=self.model, max_tokens=150)
            logger.debug(f"Answer: {answer}")
            self.ctx.console.print(to_human(f"Buddy: {answer}", Tone.SUCCESS))

            audio_path = await self.audio_service.text_to_speech(answer, self.ctx.session.answer_audio_path)
            await self.audio_service.play_audio(audio_path)
            return answer
        except Exception:
            logger.exception("Failed to answer question")
            return None

    async def ensure_summary(self) -> None:
        """Summarize the discussion so far when no summary exists yet."""
        if self.show_assistant is None or self.ctx.session.current_summary():
            return
        logger.debug("No summary yet; summarizing before answering")
        await asyncio.gather(*self.show_assistant.summarize_latest())

    def answer_messages(self, question: str) -> List[Message]:
        session = self.ctx.session
        summary = session.current_summary()
        topics = "\n".join(session.current_topics().splitlines()[-self.context_topics:])
        previous_discussion = self.listener.transcriber.latest(self.context_characters)

        context = (
            f"{self.ctx.config.prompt('discussion_system').format(summary=summary)}\n"
            f"Topics discussed recently:\n---\n{topics}\n---\n"
            f"Previous discussion:\n---\n{previous_discussion}\n---\n"
        )
        logger.debug(f"Context:\n{context}")
        return [
            {"role": "system", "content": context},
            {"role": "user", "content": question},
        ]
