"""Passive assistance: periodic summaries, topic extraction and show notes."""

import asyncio
import logging
from typing import Coroutine, List, Optional, Set

from ..ai.base import Message
from ..context import AppContext
from ..models.events import TranscriptEvent
from ..transcription.listener import Listener
from ..ui.display import Tone, to_human

logger = logging.getLogger(__name__)


class ShowAssistant:
    """Runs the listener alongside a fixed-interval summarization loop.

    Discussion text accumulates between cycles. Each cycle hands the
    accumulated text off (resetting the accumulator at once) to two
    independent AI calls: topic extraction and summarization.
    """

    def __init__(self, ctx: AppContext, listener: Listener):
        self.ctx = ctx
        self.listener = listener
        self.interval = float(ctx.config.get('show_assistant.summary_interval', 15))
        self.current_discussion = ""
        self._tasks: Set[asyncio.Task] = set()

        listener.subscribe(self.handle_transcription)

    def handle_transcription(self, event: TranscriptEvent) -> None:
        self.current_discussion += event.text

    async def start(self) -> None:
        """Run the listener and the summarization loop until shutdown."""
        await asyncio.gather(self._run_listener(), self.periodic_summarization())

    async def stop(self) -> None:
        """Stop the listener and the loop, summarize what is left, then wait for spawned tasks."""
        self.ctx.request_shutdown()
        self.listener.stop()
        self.summarize_latest()
        await self.drain()

    async def drain(self) -> None:
        """Wait for in-flight topic and summary calls."""
        while self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} summarization tasks...")
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _run_listener(self) -> None:
        try:
            await self.listener.start()
        except Exception:
            logger.exception("Listener failed; shutting down")
            self.ctx.request_shutdown()

    async def periodic_summarization(self) -> None:
        while not await self.ctx.wait_for_shutdown(self.interval):
            try:
                self.summarize_latest()
            except Exception as e:
                logger.warning(f"[summarization] periodic summarization failed: {e}")
        logger.debug("Shutdown: periodic_summarization...")

    def take_discussion(self) -> str:
        """Hand off the accumulated discussion; later text belongs to the next cycle."""
        discussion, self.current_discussion = self.current_discussion, ""
        return discussion.strip()

    def summarize_latest(self) -> List[asyncio.Task]:
        discussion = self.take_discussion()
        if not discussion:
            return []

        logger.debug(f"[periodic summarization] Latest transcript: {discussion}")
        return [
            self._spawn(self.update_topics(discussion), "update-topics"),
            self._spawn(self.think_about(discussion), "summarize"),
        ]

    def _spawn(self, coro: Coroutine, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def update_topics(self, text: str) -> Optional[str]:
        try:
            logger.debug(f"Looking for topics related to: {text}")
            response = await self.ctx.backend.complete(
                self.topic_extraction_messages(text),
                model=self.ctx.config.get('openai.topics_model'),
                max_tokens=500,
            )
            new_topics = response.replace("NONE", "").strip()
            if not new_topics:
                logger.debug("No new topics")
                return None

            self.ctx.session.announce_topics(new_topics)
            self.ctx.session.append_topics(new_topics)
            return new_topics
        except Exception as e:
            logger.error(f"Failed to update topics: {e}")
            return None

    async def think_about(self, text: str) -> Optional[str]:
        try:
            logger.debug("Summarizing current discussion...")
            new_summary = await self.ctx.backend.complete(
                self.discussion_messages(text),
                model=self.ctx.config.get('openai.summary_model'),
                max_tokens=250,
            )
            self.ctx.console.print(to_human(f"Thoughts: {new_summary}", Tone.INFO))
            self.ctx.session.replace_summary(new_summary)
            return new_summary
        except Exception as e:
            logger.error(f"Failed to summarize discussion: {e}")
            return None

    async def generate_show_notes(self) -> Optional[str]:
        """Write show notes for the whole session. Best effort."""
        transcript = self.ctx.session.current_transcript()
        if not transcript.strip():
            logger.info("Empty transcript; skipping show notes")
            return None

        try:
            show_notes = await self.ctx.backend.complete(
                self.show_notes_messages(transcript),
                model=self.ctx.config.get('openai.show_notes_model'),
                max_tokens=500,
            )
            path = self.ctx.session.write_show_notes(show_notes)
            self.ctx.console.print(to_human(f"Show notes saved to: {path}", Tone.SUCCESS))
            return show_notes
        except Exception as e:
            logger.error(f"Failed to generate show notes: {e}")
            return None

    def topic_extraction_messages(self, text: str) -> List[Message]:
        config = self.ctx.config
        return [
            {"role": "system", "content": config.prompt('topic_extraction_system')},
            {"role": "user", "content": config.prompt('topic_extraction_user').format(discussion=text)},
        ]

    def discussion_messages(self, text: str) -> List[Message]:
        config = self.ctx.config
        summary = self.ctx.session.current_summary()
        return [
            {"role": "system", "content": config.prompt('discussion_system').format(summary=summary)},
            {"role": "user", "content": config.prompt('discussion_user').format(discussion=text)},
        ]

    def show_notes_messages(self, transcript: str) -> List[Message]:
        config = self.ctx.config
        return [
            {"role": "system", "content": config.prompt('show_notes_system')},
            {"role": "user", "content": config.prompt('show_notes_user').format(
                transcript=transcript, topics=self.ctx.session.current_topics())},
        ]
