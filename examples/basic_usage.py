"""Basic publish example.

This example shows the simplest usage pattern: connect to a node,
publish a folder, and print the root CID with a gateway link. Files
are uploaded and pinned; failures are reported per file.
"""

from pathlib import Path

from edufs import ClientConfig, Publisher, RichProgressReporter, create_node


# Settings come from EDUFS_NODE / EDUFS_GATEWAY / EDUFS_TIMEOUT,
# defaulting to a Kubo daemon on localhost
config = ClientConfig.from_env()

# create_node picks the adapter from the endpoint:
# http(s) URLs and multiaddresses -> KuboNode, file://<dir> -> LocalNode
node = create_node(config.node, timeout=config.timeout)
try:
    with RichProgressReporter() as progress:
        result = Publisher(node, progress=progress).publish(Path("./site"))
finally:
    node.close()

print(f"CID: {result.root_cid}")
print(f"URL: {config.gateway_link(result.root_cid)}")

# Kubo adds the folder as one directory object. Nodes without that
# ability fall back to per-file uploads, where the root is only the
# first file's CID.
if result.root_is_partial:
    print("Root CID addresses the first file, not the folder")

for item in result.failed:
    print(f"{item.entry.relative_path}: {item.status.value} ({item.error})")
