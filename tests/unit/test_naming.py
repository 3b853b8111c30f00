"""Tests for NamePublisher."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from edufs.core.exceptions import NamePublishError, NameResolveError
from edufs.core.models import ContentID
from edufs.core.naming import NamePublisher


if TYPE_CHECKING:
    from tests.conftest import FakeNode


@pytest.mark.core
@pytest.mark.tier(0)
class TestNamePublisher:
    """Tests for binding and resolving names."""

    def test_publish_then_resolve(self, fake_node: FakeNode) -> None:
        publisher = NamePublisher(fake_node)
        binding = publisher.publish_name("website", ContentID("QmRoot"))

        assert binding.name == "website"
        assert binding.cid == "QmRoot"
        assert binding.value == "/ipfs/QmRoot"
        assert publisher.resolve("website") == "/ipfs/QmRoot"

    def test_republish_moves_the_name(self, fake_node: FakeNode) -> None:
        publisher = NamePublisher(fake_node)
        publisher.publish_name("website", ContentID("QmOld"))
        publisher.publish_name("website", ContentID("QmNew"))
        assert publisher.resolve("/ipns/website") == "/ipfs/QmNew"

    def test_empty_name_rejected(self, fake_node: FakeNode) -> None:
        with pytest.raises(ValueError, match="empty"):
            NamePublisher(fake_node).publish_name("", ContentID("QmRoot"))

    def test_rejected_binding_surfaces(self, fake_node: FakeNode) -> None:
        fake_node.fail_publish = True
        with pytest.raises(NamePublishError) as exc_info:
            NamePublisher(fake_node).publish_name("nokey", ContentID("QmRoot"))
        assert exc_info.value.name == "nokey"
        assert exc_info.value.cid == "QmRoot"
        assert fake_node.names == {}

    def test_unknown_name_raises_resolve_error(self, fake_node: FakeNode) -> None:
        with pytest.raises(NameResolveError) as exc_info:
            NamePublisher(fake_node).resolve("unbound")
        assert exc_info.value.name == "unbound"
