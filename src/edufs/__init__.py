"""edufs - publish files and folders to a content-addressable storage node.

This library walks a file or directory, uploads and pins its content on
an IPFS (Kubo) node or a local content-addressed store, and can bind a
naming-service record to the result.

Example:
    >>> from edufs import Publisher, create_node
    >>> node = create_node("http://127.0.0.1:5001")
    >>> result = Publisher(node).publish("site/")
    >>> print(result.root_cid)
"""

from edufs.adapters.executor import SynchronousExecutor, ThreadPoolExecutorAdapter
from edufs.adapters.node import KuboNode, LocalNode, create_node
from edufs.config import ClientConfig, endpoint_to_url
from edufs.core.exceptions import (
    ConfigurationError,
    ContentNotFoundError,
    EdufsError,
    NamePublishError,
    NameResolveError,
    NodeConnectionError,
    NodeError,
    NodeNotFoundError,
    NoFilesPublishedError,
    PathNotFoundError,
    PinFailedError,
    PublishCancelledError,
    RetrievalError,
    UploadFailedError,
    WalkError,
)
from edufs.core.models import (
    ContentID,
    DirectoryListing,
    FileEntry,
    NameBinding,
    NodeIdentity,
    PublishResult,
    RootKind,
    UploadResult,
    UploadStatus,
)
from edufs.core.naming import NamePublisher
from edufs.core.pinning import PinManager
from edufs.core.ports import (
    NodePort,
    NullProgressReporter,
    ProgressCallback,
    ProgressReporter,
)
from edufs.core.retrieval import Retriever
from edufs.core.services import PublishMode, Publisher
from edufs.core.streams import CancelToken, ProgressStream
from edufs.core.upload import Uploader
from edufs.core.walker import FileWalk, walk
from edufs.progress import RichProgressReporter


__version__ = "0.3.0"

__all__ = [
    "CancelToken",
    "ClientConfig",
    "ConfigurationError",
    "ContentID",
    "ContentNotFoundError",
    "DirectoryListing",
    "EdufsError",
    "FileEntry",
    "FileWalk",
    "KuboNode",
    "LocalNode",
    "NameBinding",
    "NamePublishError",
    "NamePublisher",
    "NameResolveError",
    "NoFilesPublishedError",
    "NodeConnectionError",
    "NodeError",
    "NodeIdentity",
    "NodeNotFoundError",
    "NodePort",
    "NullProgressReporter",
    "PathNotFoundError",
    "PinFailedError",
    "PinManager",
    "ProgressCallback",
    "ProgressReporter",
    "ProgressStream",
    "PublishCancelledError",
    "PublishMode",
    "PublishResult",
    "Publisher",
    "RetrievalError",
    "Retriever",
    "RichProgressReporter",
    "RootKind",
    "SynchronousExecutor",
    "ThreadPoolExecutorAdapter",
    "UploadFailedError",
    "UploadResult",
    "UploadStatus",
    "Uploader",
    "WalkError",
    "__version__",
    "create_node",
    "endpoint_to_url",
    "walk",
]
