"""Review submission MCP tool."""

import time
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import Field
from starlette.concurrency import run_in_threadpool

from diffstory.core.errors import DiffstoryError
from diffstory.model.review import Review, Section

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from diffstory.review.service import ReviewService

log = structlog.get_logger(__name__)

SUBMIT_REVIEW_DESCRIPTION = (
    "Submit a code review for display in the diffstory viewer. "
    "Group the diff hunks into narrative sections; every hunk needs an "
    "importance of 'high', 'medium' or 'low'."
)


def register_tools(mcp: "FastMCP", service: "ReviewService") -> None:
    """Register the submit_review tool."""

    @mcp.tool(name="submit_review", description=SUBMIT_REVIEW_DESCRIPTION)
    async def submit_review(
        workingDirectory: str = Field(  # noqa: N803
            "", description="The absolute path to the project directory"
        ),
        title: str = Field("", description="Title of the review"),
        sections: list[Section] | None = Field(None, description="Review sections with hunks"),
    ) -> dict[str, Any]:
        """Store a review for the given working directory.

        Returns ``{success, filePath}`` on success and ``{success: false,
        error}`` when the review is rejected or cannot be stored.
        """
        start_time = time.perf_counter()
        log.info(
            "tool_start",
            tool="submit_review",
            working_directory=workingDirectory,
            sections=len(sections or []),
        )

        review = Review(working_directory=workingDirectory, title=title, sections=sections or [])
        try:
            result = await run_in_threadpool(service.submit, review, strict=True)
        except DiffstoryError as e:
            log.warning(
                "tool_error",
                tool="submit_review",
                error_code=e.code.value,
                error=e.message,
                elapsed_ms=int((time.perf_counter() - start_time) * 1000),
            )
            return {"success": False, "error": e.message}

        log.info(
            "tool_complete",
            tool="submit_review",
            file_path=str(result.file_path),
            elapsed_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return {"success": True, "filePath": str(result.file_path)}
