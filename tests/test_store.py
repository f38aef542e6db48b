"""Tests for the declaration store."""

import threading

import pytest

from subdivision import (
    AlreadyStartedError,
    DeclarationStore,
    DuplicateIdError,
    InvalidAddinError,
    PathDeclaration,
)


class TestRegister:
    def test_list_preserves_insertion_order(self) -> None:
        store = DeclarationStore()
        store.register("Web/Routes", {"type": "Route", "label": "first"})
        store.register("Web/Routes", {"type": "Route", "label": "second"})
        store.register("Other", {"type": "Route", "label": "other"})

        assert [addin["label"] for addin in store.list("Web/Routes")] == ["first", "second"]

    def test_unknown_path_is_empty(self) -> None:
        assert DeclarationStore().list("Nothing/Here") == ()

    def test_list_is_a_snapshot(self) -> None:
        store = DeclarationStore()
        store.register("P", {"type": "T"})
        snapshot = store.list("P")
        store.register("P", {"type": "T"})
        assert len(snapshot) == 1
        assert len(store.list("P")) == 2

    def test_duplicate_id_on_same_path(self) -> None:
        store = DeclarationStore()
        store.register("P", {"type": "T", "id": "x"})
        with pytest.raises(DuplicateIdError) as exc_info:
            store.register("P", {"type": "T", "id": "x"})
        assert exc_info.value.path == "P"
        assert exc_info.value.addin_id == "x"
        assert len(store.list("P")) == 1

    def test_same_id_on_different_paths(self) -> None:
        store = DeclarationStore()
        store.register("P", {"type": "T", "id": "x"})
        store.register("Q", {"type": "T", "id": "x"})
        assert store.paths() == ("P", "Q")

    def test_anonymous_addins_never_collide(self) -> None:
        store = DeclarationStore()
        store.register("P", {"type": "T"})
        store.register("P", {"type": "T"})
        assert len(store.list("P")) == 2

    def test_invalid_declaration(self) -> None:
        with pytest.raises(InvalidAddinError):
            DeclarationStore().register("P", {"order": 1})

    def test_register_after_freeze(self) -> None:
        store = DeclarationStore()
        store.freeze()
        with pytest.raises(AlreadyStartedError):
            store.register("P", {"type": "T"})

    def test_path_exists(self) -> None:
        store = DeclarationStore()
        store.register("P", {"type": "T"})
        assert store.path_exists("P")
        assert not store.path_exists("Q")

    def test_concurrent_registration(self) -> None:
        store = DeclarationStore()

        def load_module(module_number: int) -> None:
            for index in range(50):
                store.register("P", {"type": "T", "id": f"m{module_number}-{index}"})

        threads = [threading.Thread(target=load_module, args=(number,)) for number in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.list("P")) == 400


class TestExtend:
    def test_registers_every_declaration(self) -> None:
        store = DeclarationStore()
        store.extend(
            [
                PathDeclaration(path="P", addins=[{"type": "T", "id": "a"}], source="one"),
                PathDeclaration(path="P", addins=[{"type": "T", "id": "b"}], source="two"),
            ]
        )
        assert [(addin.id, addin.source) for addin in store.list("P")] == [
            ("a", "one"),
            ("b", "two"),
        ]

    def test_is_atomic_on_duplicate(self) -> None:
        store = DeclarationStore()
        store.register("P", {"type": "T", "id": "taken"})
        with pytest.raises(DuplicateIdError):
            store.extend(
                [
                    PathDeclaration(path="Q", addins=[{"type": "T"}]),
                    PathDeclaration(path="P", addins=[{"type": "T", "id": "taken"}]),
                ]
            )
        assert store.list("Q") == ()
        assert len(store.list("P")) == 1

    def test_duplicate_within_batch(self) -> None:
        store = DeclarationStore()
        with pytest.raises(DuplicateIdError):
            store.extend(
                [PathDeclaration(path="P", addins=[{"type": "T", "id": "x"}, {"type": "T", "id": "x"}])]
            )
        assert store.list("P") == ()

    def test_is_atomic_on_invalid_addin(self) -> None:
        store = DeclarationStore()
        with pytest.raises(InvalidAddinError):
            store.extend(
                [PathDeclaration(path="P", addins=[{"type": "T"}, {"type": ""}])]
            )
        assert store.list("P") == ()
