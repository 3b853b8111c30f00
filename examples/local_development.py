"""Local development example using LocalNode.

This example shows how to develop and test publishing workflows
without running an IPFS daemon. LocalNode stores content by sha256
digest in a plain directory and supports pins and names, so the same
code later runs unchanged against a Kubo node.
"""

from pathlib import Path

from edufs import LocalNode, NamePublisher, Publisher, Retriever


STORE = Path("./test_fixtures/edufs_store")
SITE = Path("./test_fixtures/site")


def setup_site() -> None:
    """Create a small site to publish."""
    (SITE / "css").mkdir(parents=True, exist_ok=True)
    (SITE / "index.html").write_text("<h1>Course notes</h1>")
    (SITE / "css" / "style.css").write_text("h1 { color: teal; }")


def publish_site(node: LocalNode) -> str:
    """Publish the site and point the 'course' name at it."""
    result = Publisher(node).publish(SITE)
    for item in result.per_file:
        print(f"{item.entry.relative_path}: {item.cid}")

    binding = NamePublisher(node).publish_name("course", result.root_cid)
    return binding.value


if __name__ == "__main__":
    setup_site()
    node = LocalNode(STORE)

    path = publish_site(node)
    print(f"course -> {path}")

    # Read the content back through the name
    cid = NamePublisher(node).resolve("course").removeprefix("/ipfs/")
    print(Retriever(node).read_all(cid).decode())
