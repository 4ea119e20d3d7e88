"""Tests for image collection operations."""

import pytest
from PyQt6.QtCore import QRectF

from visio_annotate.core import collection
from visio_annotate.core.models import AnnotatedImage


@pytest.fixture
def images(tmp_path):
    return [AnnotatedImage(path=tmp_path / f"{name}.png") for name in "abc"]


class TestQueries:
    """Tests for read-only collection helpers."""

    def test_marked_preserves_order(self, images):
        images[2].marked = True
        images[0].marked = True

        assert collection.marked(images) == [images[0], images[2]]

    def test_marked_empty(self, images):
        assert collection.marked(images) == []

    def test_active_image(self, images):
        images[1].active = True

        assert collection.active_index(images) == 1
        assert collection.active_image(images) is images[1]

    def test_no_active_image(self, images):
        assert collection.active_index(images) is None
        assert collection.active_image(images) is None

    def test_find_image(self, images, tmp_path):
        assert collection.find_image(images, tmp_path / "b.png") is images[1]
        assert collection.find_image(images, tmp_path / "z.png") is None

    def test_pending_count(self, images):
        images[0].enabled = False

        assert collection.pending_count(images) == 1


class TestActivateNext:
    """Tests for active image navigation."""

    def test_forward(self, images):
        images[0].active = True

        assert collection.activate_next(images) is True
        assert [i.active for i in images] == [False, True, False]

    def test_backward(self, images):
        images[1].active = True

        assert collection.activate_next(images, reverse=True) is True
        assert [i.active for i in images] == [True, False, False]

    def test_forward_at_last_is_noop(self, images):
        images[2].active = True

        assert collection.activate_next(images) is False
        assert [i.active for i in images] == [False, False, True]

    def test_backward_at_first_is_noop(self, images):
        images[0].active = True

        assert collection.activate_next(images, reverse=True) is False
        assert [i.active for i in images] == [True, False, False]

    def test_no_active_is_noop(self, images):
        assert collection.activate_next(images) is False
        assert collection.activate_next(images, reverse=True) is False
        assert not any(i.active for i in images)

    def test_empty_collection(self):
        assert collection.activate_next([]) is False
        assert collection.activate_next([], reverse=True) is False


class TestMutations:
    """Tests for collection-level mutations."""

    def test_activate(self, images):
        images[0].active = True

        assert collection.activate(images, images[2]) is True
        assert [i.active for i in images] == [False, False, True]

    def test_activate_unknown_image(self, images, tmp_path):
        images[0].active = True

        assert collection.activate(images, AnnotatedImage(path=tmp_path / "z.png")) is False
        assert images[0].active is True

    def test_toggle_marked(self, images):
        assert collection.toggle_marked(images, images[1]) is True
        assert images[1].marked is True
        collection.toggle_marked(images, images[1])
        assert images[1].marked is False

    def test_remove_active_annotation(self, images):
        images[1].active = True
        kept = images[1].add_annotation(QRectF())
        images[1].add_annotation(QRectF())
        images[0].add_annotation(QRectF())

        removed = collection.remove_active_annotation(images)

        assert removed is not None
        assert images[1].annotations == [kept]
        assert len(images[0].annotations) == 1

    def test_remove_active_annotation_without_active_image(self, images):
        images[0].add_annotation(QRectF())

        assert collection.remove_active_annotation(images) is None
        assert len(images[0].annotations) == 1
