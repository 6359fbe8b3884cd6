"""Tests for bookmark and action request schemas."""
from uuid import uuid4

import pytest
from pydantic import TypeAdapter, ValidationError

from schemas.action import (
    BookmarkAction,
    CreateAction,
    DeleteAction,
    ToggleArchiveAction,
    ToggleStarAction,
    UpdateAction,
)
from schemas.bookmark import BatchDeleteRequest, BookmarkCreate, BookmarkUpdate

action_adapter = TypeAdapter(BookmarkAction)


class TestBookmarkCreate:
    """Tests for BookmarkCreate."""

    def test__bookmark_create__normalizes_root_url(self) -> None:
        """Root URLs gain a trailing slash; paths are kept as-is."""
        assert str(BookmarkCreate(url="https://example.com", title="T").url) == (
            "https://example.com/"
        )
        assert str(BookmarkCreate(url="https://example.com/page", title="T").url) == (
            "https://example.com/page"
        )

    def test__bookmark_create__defaults(self) -> None:
        """Optional fields default to empty values."""
        data = BookmarkCreate(url="https://example.com", title="T")
        assert data.description is None
        assert data.favicon is None
        assert data.starred is False
        assert data.tags == []

    def test__bookmark_create__null_tags_become_empty(self) -> None:
        """A null tag list is treated as no tags."""
        assert BookmarkCreate(url="https://example.com", title="T", tags=None).tags == []

    def test__bookmark_create__requires_title(self) -> None:
        """Title is mandatory."""
        with pytest.raises(ValidationError):
            BookmarkCreate(url="https://example.com")

    def test__bookmark_create__rejects_invalid_url(self) -> None:
        """Only http(s) URLs are accepted."""
        with pytest.raises(ValidationError):
            BookmarkCreate(url="ftp://example.com", title="T")


class TestBookmarkUpdate:
    """Tests for BookmarkUpdate."""

    def test__bookmark_update__only_sent_fields_are_set(self) -> None:
        """exclude_unset keeps omitted fields out of the update."""
        data = BookmarkUpdate(title="New")
        assert data.model_dump(exclude_unset=True) == {"title": "New"}

    def test__bookmark_update__null_description_is_kept(self) -> None:
        """An explicit null description is a request to clear it."""
        data = BookmarkUpdate.model_validate({"description": None})
        assert data.model_dump(exclude_unset=True) == {"description": None}

    def test__bookmark_update__empty_tags_are_kept(self) -> None:
        """An empty tag list is a request to clear tags."""
        assert BookmarkUpdate(tags=[]).model_dump(exclude_unset=True) == {"tags": []}

    @pytest.mark.parametrize("field", ["title", "starred"])
    def test__bookmark_update__rejects_null(self, field: str) -> None:
        """Title and starred cannot be cleared."""
        with pytest.raises(ValidationError):
            BookmarkUpdate.model_validate({field: None})


class TestBatchDeleteRequest:
    """Tests for BatchDeleteRequest."""

    def test__batch_delete__requires_at_least_one_id(self) -> None:
        """An empty id list is rejected."""
        with pytest.raises(ValidationError):
            BatchDeleteRequest(ids=[])


class TestBookmarkAction:
    """Tests for the intent-discriminated action union."""

    def test__action__dispatches_on_intent(self) -> None:
        """Each intent parses into its own model."""
        bookmark_id = str(uuid4())
        cases = {
            "delete": DeleteAction,
            "toggleStar": ToggleStarAction,
            "toggleArchive": ToggleArchiveAction,
            "update": UpdateAction,
        }
        for intent, model in cases.items():
            action = action_adapter.validate_python(
                {"intent": intent, "bookmark_id": bookmark_id},
            )
            assert isinstance(action, model)

    def test__action__unknown_intent_rejected(self) -> None:
        """Unknown intents fail validation."""
        with pytest.raises(ValidationError):
            action_adapter.validate_python({"intent": "nope"})

    def test__action__missing_bookmark_id_rejected(self) -> None:
        """Intents that target a bookmark require its id."""
        with pytest.raises(ValidationError):
            action_adapter.validate_python({"intent": "toggleStar"})

    def test__create_action__to_create(self) -> None:
        """Tag strings are split and blank descriptions dropped."""
        action = action_adapter.validate_python({
            "intent": "create",
            "url": "https://example.com",
            "title": "Example",
            "description": "",
            "tags": " news   tech ",
        })
        assert isinstance(action, CreateAction)

        data = action.to_create()
        assert str(data.url) == "https://example.com/"
        assert data.description is None
        assert data.tags == ["news", "tech"]

    def test__create_action__invalid_tag_raises(self) -> None:
        """Tag validation runs when converting to the service input."""
        action = CreateAction(
            intent="create", url="https://example.com", title="T", tags="x" * 51,
        )
        with pytest.raises(ValidationError):
            action.to_create()

    def test__update_action__to_update(self) -> None:
        """Only the submitted fields end up in the update."""
        action = UpdateAction(
            intent="update", bookmark_id=uuid4(), title="New", description="", tags="a b",
        )
        assert action.to_update().model_dump(exclude_unset=True) == {
            "title": "New",
            "tags": ["a", "b"],
        }

    def test__update_action__empty_tag_string_clears_tags(self) -> None:
        """An empty tag string is an explicit empty tag set."""
        action = UpdateAction(intent="update", bookmark_id=uuid4(), tags="")
        assert action.to_update().model_dump(exclude_unset=True) == {"tags": []}

    def test__update_action__omitted_tags_untouched(self) -> None:
        """Without a tag string the tags are not part of the update."""
        action = UpdateAction(intent="update", bookmark_id=uuid4(), title="Only title")
        assert "tags" not in action.to_update().model_dump(exclude_unset=True)
