"""Per-file code review agent."""

import asyncio
from typing import Awaitable, Callable, Sequence

from repolens.agents.base import AgentContext, BaseAgent
from repolens.analysis.batching import FILE_BATCH_DELAY, FILE_BATCH_SIZE, run_in_batches
from repolens.analysis.models import FileVerdict
from repolens.code.discovery import CodeFile
from repolens.llm.schemas import MalformedResponseError, decode_file_review
from repolens.prompts import FILE_REVIEW_PROMPT, FILE_REVIEW_SYSTEM_PROMPT
from repolens.state.registry import CancellationToken


MAX_REVIEW_LINES = 200
HEAD_LINES = 150
TAIL_LINES = 50
TRUNCATION_MARKER = "// ... (content truncated for analysis) ..."


def truncate_content(content: str) -> str:
    """Keep the head and tail of long files so prompts stay bounded."""
    lines = content.split("\n")
    if len(lines) <= MAX_REVIEW_LINES:
        return content
    return "\n".join([*lines[:HEAD_LINES], TRUNCATION_MARKER, *lines[-TAIL_LINES:]])


class FileReviewAgent(BaseAgent):
    """Agent that asks the reviewer model for a structured verdict per file.

    Reviewing is total: any provider failure or unusable response yields
    the fallback verdict for that file instead of an exception.
    """

    def __init__(
        self,
        context: AgentContext,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the agent.

        Args:
            context: Agent context with the reviewer provider
            sleep: Awaitable used for the pause between batches
        """
        super().__init__(context)
        self.sleep = sleep

    def build_prompt(self, code_file: CodeFile) -> str:
        return FILE_REVIEW_PROMPT.format(
            language=code_file.language,
            file_path=code_file.relative_path,
            fence=code_file.extension.lstrip("."),
            content=truncate_content(code_file.content),
        )

    async def review(self, code_file: CodeFile) -> FileVerdict:
        """Review a single file.

        Args:
            code_file: File to review

        Returns:
            The decoded verdict, or the fallback verdict on any failure
        """
        try:
            text = await self._complete(FILE_REVIEW_SYSTEM_PROMPT, self.build_prompt(code_file))
            payload = decode_file_review(text)
        except MalformedResponseError as e:
            self._log_warning(f"Unusable review for {code_file.relative_path}: {e}")
            return FileVerdict.fallback(code_file.relative_path)
        except Exception as e:
            self._log_warning(f"Error analyzing file {code_file.relative_path}: {e}")
            return FileVerdict.fallback(code_file.relative_path)

        return payload.to_verdict(code_file.relative_path)

    async def review_all(
        self,
        files: Sequence[CodeFile],
        cancel_token: CancellationToken | None = None,
    ) -> list[FileVerdict]:
        """Review files in paced batches.

        Returns:
            One verdict per file, in input order

        Raises:
            AnalysisCancelledError: If cancelled between batches
        """
        self._log_info(f"Analyzing {len(files)} code files...")
        verdicts = await run_in_batches(
            files,
            self.review,
            batch_size=FILE_BATCH_SIZE,
            delay=FILE_BATCH_DELAY,
            cancel_token=cancel_token,
            on_error=lambda code_file, _: FileVerdict.fallback(code_file.relative_path),
            sleep=self.sleep,
            label="file",
        )
        self._log_info("Code analysis completed")
        return verdicts
