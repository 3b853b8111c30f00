"""Error handling patterns with recovery hints.

This example demonstrates how to handle common errors and use
the recovery_hint property to provide actionable guidance.
"""

from pathlib import Path

from edufs import (
    ContentNotFoundError,
    # Exceptions
    EdufsError,
    NamePublisher,
    NamePublishError,
    NoFilesPublishedError,
    PinManager,
    PublishCancelledError,
    PublishResult,
    Publisher,
    Retriever,
    create_node,
)
from edufs.core.streams import CancelToken


node = create_node("http://127.0.0.1:5001")


# Pattern 1: Nothing could be published
def publish_or_explain(root: Path) -> PublishResult | None:
    """Publish a folder, explaining why nothing was uploaded."""
    try:
        return Publisher(node).publish(root)
    except NoFilesPublishedError as e:
        # failures is empty when the folder had no files at all
        print(f"Nothing published from {e.root} ({len(e.failures)} failed uploads)")
        print(f"Hint: {e.recovery_hint}")
        return None


# Pattern 2: Retry only the pins that failed
def repin_failures(result: PublishResult) -> None:
    """Pin again every file whose upload succeeded but pin did not."""
    pins = PinManager(node)
    for item in result.pin_failures:
        assert item.cid is not None  # pin failures always carry a CID
        pins.pin(item.cid)


# Pattern 3: Stop a publish after a deadline
def publish_with_deadline(root: Path, seconds: float) -> PublishResult | None:
    """Give up after `seconds`, reporting what was already uploaded."""
    try:
        return Publisher(node).publish(root, cancel=CancelToken(timeout=seconds))
    except PublishCancelledError as e:
        for item in e.partial:
            print(f"Uploaded before deadline: {item.entry.relative_path} -> {item.cid}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Pattern 4: Missing content
def read_or_none(cid: str) -> bytes | None:
    """Read content, returning None if the node does not have it."""
    try:
        return Retriever(node).read_all(cid)
    except ContentNotFoundError as e:
        print(f"Not found: {e.cid}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Pattern 5: Naming failures keep the published CID usable
def publish_named(root: Path, key: str) -> str | None:
    """Publish and bind a name; fall back to the bare CID on failure."""
    result = Publisher(node).publish(root)
    try:
        binding = NamePublisher(node).publish_name(key, result.root_cid)
    except NamePublishError as e:
        print(f"Name not updated, content is still at /ipfs/{result.root_cid}")
        print(f"Hint: {e.recovery_hint}")
        return None
    return binding.name


# Pattern 6: Catch-all for any library error
def publish_safe(root: Path) -> PublishResult | None:
    """Publish with comprehensive error handling."""
    try:
        return Publisher(node).publish(root)
    except EdufsError as e:
        # All edufs exceptions have recovery_hint
        print(f"Error: {e}")
        if e.recovery_hint:
            print(f"Hint: {e.recovery_hint}")
        return None


if __name__ == "__main__":
    result = publish_safe(Path("./site"))
    if result is not None:
        repin_failures(result)
    node.close()
