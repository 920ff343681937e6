"""GitHub-backed listing and content sources for the repository walker."""

from __future__ import annotations

import base64
import binascii
from typing import List

from ..errors import FileReadFailure, GitHubAPIError
from ..logging import get_logger
from ..models import FileDescriptor, RepositoryIdentity
from .client import GitHubClient

# 404: repository or branch missing. 409: "Git Repository is empty."
_EMPTY_LISTING_STATUSES = {404, 409}


class RepositoryContents:
    """Lists a repository tree in one call and fetches blobs by sha."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client
        self.logger = get_logger("github.contents")

    def list_files(self, repository: RepositoryIdentity) -> List[FileDescriptor]:
        """Return every blob in the default branch; missing or empty repos yield []."""
        try:
            metadata = self.client.get_repository(repository.owner, repository.name)
            branch = metadata.get("default_branch")
            if not isinstance(branch, str) or not branch:
                self.logger.info("%s has no default branch; treating as empty", repository)
                return []
            tree = self.client.get_tree(repository.owner, repository.name, branch)
        except GitHubAPIError as exc:
            if exc.status in _EMPTY_LISTING_STATUSES:
                reason = "not found" if exc.not_found else "empty"
                self.logger.info("%s is %s; no files to scan", repository, reason)
                return []
            raise

        if tree.get("truncated") is True:
            self.logger.warning(
                "Tree listing for %s was truncated; scanning the partial listing",
                repository,
            )

        files: List[FileDescriptor] = []
        for item in tree["tree"]:
            if not isinstance(item, dict) or item.get("type") != "blob":
                continue
            path = item.get("path")
            sha = item.get("sha")
            if isinstance(path, str) and path and isinstance(sha, str) and sha:
                files.append(FileDescriptor(path=path, content_id=sha))
        self.logger.debug("%s: listed %d files on %s", repository, len(files), branch)
        return files

    def get_content(self, repository: RepositoryIdentity, content_id: str) -> str:
        """Return the UTF-8 text of a blob; every failure becomes FileReadFailure."""
        try:
            blob = self.client.get_blob(repository.owner, repository.name, content_id)
        except GitHubAPIError as exc:
            raise FileReadFailure(content_id, str(exc)) from exc

        content = blob.get("content")
        encoding = blob.get("encoding") or "base64"
        if not isinstance(content, str):
            raise FileReadFailure(content_id, "Missing content in blob API output")

        if encoding == "base64":
            # The blob API wraps base64 payloads with newlines.
            normalized = "".join(content.split())
            try:
                raw = base64.b64decode(normalized, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise FileReadFailure(content_id, "Invalid base64 content") from exc
        elif encoding in ("utf-8", "utf8"):
            return content
        else:
            raise FileReadFailure(content_id, f"Unsupported encoding: {encoding}")

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FileReadFailure(content_id, "Failed to decode file as UTF-8") from exc


__all__ = ["RepositoryContents"]
