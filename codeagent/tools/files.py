"""File tools: createOrUpdateFiles and readFiles."""

import json
from typing import Dict, List

from pydantic import BaseModel, Field

from codeagent.config import config
from codeagent.security.validator import InputValidator
from codeagent.tools.base import (
    BaseTool,
    ToolParameters,
    ToolResult,
)
from codeagent.utils import logger


class FileEntry(BaseModel):
    """A single file to write."""

    path: str = Field(description="Path of the file, relative to the app root")
    content: str = Field(description="Full content of the file")


class CreateOrUpdateFilesParameters(ToolParameters):
    """Parameters for createOrUpdateFiles tool."""

    files: List[FileEntry] = Field(description="Files to create or overwrite")


class CreateOrUpdateFilesTool(BaseTool):
    """Tool for writing files into the sandbox."""

    name = "createOrUpdateFiles"
    description = "Create or update files in the sandbox"
    parameters_class = CreateOrUpdateFilesParameters

    async def execute(self, files: List[Dict[str, str]], **kwargs) -> ToolResult:
        """Write every file; the written set is returned in metadata."""
        written: Dict[str, str] = {}
        validator = InputValidator(enabled=config.enable_command_validation)

        try:
            for file in files:
                validator.validate_file_path(file["path"])
                self.sandbox.files.write(file["path"], file["content"])
                written[file["path"]] = file["content"]

        except Exception as e:
            logger.error(f"Error writing files: {e}")
            return ToolResult(
                success=False,
                output=f"Error: {e}",
                error=f"Error: {e}",
            )

        logger.debug(f"Wrote {len(written)} file(s): {', '.join(written)}")

        return ToolResult(
            success=True,
            output=f"Updated files: {', '.join(written)}",
            metadata={"files": written},
        )

    def update_state(self, state, result: ToolResult) -> None:
        if result.success:
            state.files.update(result.metadata.get("files", {}))


class ReadFilesParameters(ToolParameters):
    """Parameters for readFiles tool."""

    files: List[str] = Field(description="Paths of the files to read")


class ReadFilesTool(BaseTool):
    """Tool for reading files from the sandbox."""

    name = "readFiles"
    description = "Read files from the sandbox"
    parameters_class = ReadFilesParameters

    async def execute(self, files: List[str], **kwargs) -> ToolResult:
        """Return a JSON array of ``{path, content}`` objects."""
        try:
            contents = [
                {"path": path, "content": self.sandbox.files.read(path)}
                for path in files
            ]

        except Exception as e:
            logger.error(f"Error reading files: {e}")
            return ToolResult(
                success=False,
                output=f"Error: {e}",
                error=f"Error: {e}",
            )

        return ToolResult(
            success=True,
            output=json.dumps(contents),
            metadata={"paths": list(files)},
        )
