"""
Error taxonomy shared by the purchase and authoring flows.
Errors are raised internally and returned to callers as tagged results.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    WALLET_NOT_READY = "wallet_not_ready"
    PAYMENT_FAILED = "payment_failed"
    RECORD_PERSIST_FAILED = "record_persist_failed"
    CATEGORY_NOT_FOUND = "category_not_found"
    STORY_NOT_FOUND = "story_not_found"
    CHAPTER_NOT_FOUND = "chapter_not_found"
    PERSISTENCE_FAILURE = "persistence_failure"
    OWN_CHAPTER = "own_chapter"
    AUTHOR_WALLET_MISSING = "author_wallet_missing"
    PURCHASE_IN_PROGRESS = "purchase_in_progress"
    NOT_STORY_AUTHOR = "not_story_author"


# Notification titles per failure category
ERROR_TITLES: dict[ErrorKind, str] = {
    ErrorKind.NOT_AUTHENTICATED: "Sign in required",
    ErrorKind.WALLET_NOT_READY: "Wallet not ready",
    ErrorKind.PAYMENT_FAILED: "Blockchain purchase failed",
    ErrorKind.RECORD_PERSIST_FAILED: "Purchase not recorded",
    ErrorKind.CATEGORY_NOT_FOUND: "Category not found",
    ErrorKind.STORY_NOT_FOUND: "Story not found",
    ErrorKind.CHAPTER_NOT_FOUND: "Chapter not found",
    ErrorKind.PERSISTENCE_FAILURE: "Storage error",
    ErrorKind.OWN_CHAPTER: "Cannot purchase own chapter",
    ErrorKind.AUTHOR_WALLET_MISSING: "Author wallet missing",
    ErrorKind.PURCHASE_IN_PROGRESS: "Purchase in progress",
    ErrorKind.NOT_STORY_AUTHOR: "Not the story author",
}


class HerStoriesError(Exception):
    """Domain failure; kind drives notifications, cause keeps the original exception."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str = "",
        *,
        cause: BaseException | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.cause = cause
        self.detail = detail or {}

    @property
    def title(self) -> str:
        return ERROR_TITLES[self.kind]


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either value or error is set, never both."""

    value: T | None = None
    error: HerStoriesError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: HerStoriesError) -> "Result[T]":
        return cls(error=error)
