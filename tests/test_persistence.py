from pathlib import Path

from cardo.persistence.filesystem import JsonFileStore, MemoryKeyValueStore


def test_json_file_store_creates_directory_on_first_write(tmp_path: Path) -> None:
    root = tmp_path / "cache"
    store = JsonFileStore(root=root)
    assert not root.exists()

    store.set("hub_network", {"hello": "world"})

    assert root.is_dir()
    assert (root / "hub_network.json").read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert store.get("hub_network") == {"hello": "world"}


def test_json_file_store_sanitizes_keys_and_removes(tmp_path: Path) -> None:
    store = JsonFileStore(root=tmp_path)

    store.set("order-draft:anita@example.com", {"quantity": 5})

    assert store.path_for("order-draft:anita@example.com").parent == tmp_path.resolve()
    assert store.get("order-draft:anita@example.com") == {"quantity": 5}
    store.remove("order-draft:anita@example.com")
    store.remove("order-draft:anita@example.com")
    assert store.get("order-draft:anita@example.com") is None


def test_json_file_store_returns_none_for_corrupt_entry(tmp_path: Path) -> None:
    store = JsonFileStore(root=tmp_path)
    store.path_for("broken").write_text("[1, 2", encoding="utf-8")

    assert store.get("broken") is None


def test_memory_store_does_not_share_mutable_values() -> None:
    store = MemoryKeyValueStore()
    value = {"items": [1]}

    store.set("key", value)
    value["items"].append(2)

    assert store.get("key") == {"items": [1]}
