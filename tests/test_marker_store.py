from household_budget.marker_store import InMemoryMarkerStore, JsonMarkerStore


def test_in_memory_store_roundtrip():
    store = InMemoryMarkerStore({'a': '2025-03-01'})
    store.set('b', '2025-03-02')
    assert store.get('a') == '2025-03-01'
    assert store.get('b') == '2025-03-02'
    assert store.get('missing') is None


def test_json_store_persists_between_instances(tmp_path):
    path = tmp_path / 'nested' / 'marker.json'
    JsonMarkerStore(path).set('lastAutoRegisterCheck:user1', '2025-03-01')
    JsonMarkerStore(path).set('lastAutoRegisterCheck:user2', '2025-02-28')

    store = JsonMarkerStore(path)
    assert store.get('lastAutoRegisterCheck:user1') == '2025-03-01'
    assert store.get('lastAutoRegisterCheck:user2') == '2025-02-28'


def test_json_store_treats_missing_or_corrupt_file_as_empty(tmp_path):
    path = tmp_path / 'marker.json'
    assert JsonMarkerStore(path).get('key') is None

    path.write_text('{not json', encoding='utf-8')
    store = JsonMarkerStore(path)
    assert store.get('key') is None

    store.set('key', '2025-03-01')
    assert store.get('key') == '2025-03-01'


def test_json_store_ignores_non_object_documents(tmp_path):
    path = tmp_path / 'marker.json'
    path.write_text('["2025-03-01"]', encoding='utf-8')
    assert JsonMarkerStore(path).get('0') is None
