import random

import pytest

from flowbuilder.canvas.graph_store import GraphStore, Node, NodeKind


@pytest.fixture
def store():
    return GraphStore(rng=random.Random(7))


@pytest.fixture
def demo_store(store):
    store.seed_demo_flow()
    return store


class TestNodeKind:

    def test_default_labels(self):
        assert NodeKind.TRIGGER.default_label == 'New Trigger'
        assert NodeKind('condition').default_label == 'New Condition'

    def test_handles(self):
        assert not NodeKind.TRIGGER.accepts_incoming
        assert NodeKind.TRIGGER.allows_outgoing
        assert NodeKind.ACTION.accepts_incoming
        assert not NodeKind.ACTION.allows_outgoing


class TestAddNode:

    def test_add_node_near_center_and_selects(self, store):
        node = store.add_node('message', center=(500, 400))

        assert node.kind is NodeKind.MESSAGE
        assert node.label == 'New Message'
        assert 400 <= node.position[0] < 450
        assert 350 <= node.position[1] < 400
        assert store.selected_id == node.id
        assert store.get_node(node.id) == node

    def test_repeated_adds_get_unique_ids_and_jitter(self, store):
        nodes = [store.add_node(NodeKind.ACTION, center=(0, 0)) for _ in range(20)]
        assert len({n.id for n in nodes}) == 20
        assert len({n.position for n in nodes}) > 1

    def test_unknown_kind_is_rejected(self, store):
        with pytest.raises(ValueError):
            store.add_node('webhook', center=(0, 0))


class TestUpdates:

    def test_update_position(self, demo_store):
        assert demo_store.update_node_position('2', (10, 20)) is True
        assert demo_store.get_node('2').position == (10.0, 20.0)

    def test_update_unknown_is_noop(self, demo_store):
        before = demo_store.nodes
        assert demo_store.update_node_position('missing', (10, 20)) is False
        assert demo_store.nodes == before

    def test_rename(self, demo_store):
        assert demo_store.rename_node('1', 'On Signup') is True
        assert demo_store.get_node('1').label == 'On Signup'
        assert demo_store.rename_node('nope', 'x') is False

    def test_data_payload_is_kept_opaque(self, store):
        node = store.add_node('message', center=(0, 0), data={'text': 'hi', 'delay': 3})
        store.update_node_position(node.id, (1, 1))
        assert store.get_node(node.id).data == {'text': 'hi', 'delay': 3}


class TestDelete:

    def test_delete_cascades_connections(self, demo_store):
        extra = demo_store.add_node('action', center=(0, 0))
        demo_store.add_connection('2', extra.id)

        assert demo_store.delete_node('2') is True

        node_ids = {n.id for n in demo_store.nodes}
        assert '2' not in node_ids
        assert demo_store.connections == []
        for conn in demo_store.connections:
            assert conn.source_id in node_ids and conn.target_id in node_ids

    def test_delete_clears_selection(self, demo_store):
        demo_store.select('1')
        demo_store.delete_node('1')
        assert demo_store.selected_id is None

    def test_delete_other_node_keeps_selection(self, demo_store):
        demo_store.select('2')
        demo_store.delete_node('1')
        assert demo_store.selected_id == '2'

    def test_delete_unknown(self, demo_store):
        assert demo_store.delete_node('ghost') is False
        assert len(demo_store.nodes) == 2

    def test_trigger_message_scenario(self, store):
        trigger = store.add_node('trigger', center=(0, 0))
        message = store.add_node('message', center=(300, 0))
        conn = store.add_connection(trigger.id, message.id)
        assert conn is not None

        store.delete_node(trigger.id)

        assert store.connections == []
        assert [n.id for n in store.nodes] == [message.id]


class TestConnections:

    def test_missing_endpoint(self, demo_store):
        assert demo_store.add_connection('1', 'ghost') is None

    def test_trigger_cannot_be_target(self, demo_store):
        assert demo_store.add_connection('2', '1') is None

    def test_action_cannot_be_source(self, demo_store):
        action = demo_store.add_node('action', center=(0, 0))
        assert demo_store.add_connection(action.id, '2') is None
        assert demo_store.add_connection('2', action.id) is not None

    def test_parallel_connections_are_distinct(self, demo_store):
        second = demo_store.add_connection('1', '2')
        assert second is not None
        assert len(demo_store.connections) == 2
        assert len(demo_store.incident_connections('1')) == 2

    def test_reused_connection_id_gets_fresh_id(self, demo_store):
        second = demo_store.add_connection('1', '2', connection_id='c1')

        assert second is not None
        assert second.id != 'c1'
        assert [c.id for c in demo_store.connections].count('c1') == 1
        assert demo_store.remove_connection(second.id) is True
        assert demo_store.get_connection('c1') is not None

    def test_remove_connection(self, demo_store):
        assert demo_store.remove_connection('c1') is True
        assert demo_store.connections == []
        assert demo_store.remove_connection('c1') is False


class TestSnapshots:

    def test_seed_demo_flow(self, demo_store):
        labels = [n.label for n in demo_store.nodes]
        assert labels == ['Start Flow', 'Welcome Message']
        conn = demo_store.get_connection('c1')
        assert (conn.source_id, conn.target_id) == ('1', '2')

    def test_to_dict_shape(self, demo_store):
        snap = demo_store.to_dict()
        assert snap['nodes'][0] == {
            'id': '1', 'type': 'trigger', 'label': 'Start Flow', 'x': 100.0, 'y': 300.0, 'data': {},
        }
        assert snap['connections'] == [{'id': 'c1', 'sourceId': '1', 'targetId': '2'}]

    def test_load_dict_drops_dangling_connections(self, store):
        store.load_dict({
            'nodes': [
                {'id': 'a', 'type': 'trigger', 'label': 'A', 'x': 0, 'y': 0},
                {'id': 'b', 'type': 'message', 'label': 'B', 'x': 300, 'y': 0},
            ],
            'connections': [
                {'id': 'ab', 'sourceId': 'a', 'targetId': 'b'},
                {'id': 'ax', 'sourceId': 'a', 'targetId': 'x'},
            ],
        })
        assert [c.id for c in store.connections] == ['ab']
        assert store.get_node('b') == Node(id='b', kind=NodeKind.MESSAGE, label='B', position=(300.0, 0.0))

    def test_load_replaces_selection(self, demo_store):
        demo_store.select('1')
        demo_store.load_dict({'nodes': [], 'connections': []})
        assert demo_store.selected_id is None
        assert demo_store.nodes == []

    def test_load_dict_duplicate_connection_ids(self, store):
        store.load_dict({
            'nodes': [
                {'id': 'a', 'type': 'trigger'},
                {'id': 'b', 'type': 'message'},
                {'id': 'c', 'type': 'action'},
            ],
            'connections': [
                {'id': 'dup', 'sourceId': 'a', 'targetId': 'b'},
                {'id': 'dup', 'sourceId': 'b', 'targetId': 'c'},
            ],
        })
        ids = [c.id for c in store.connections]
        assert len(ids) == 2
        assert len(set(ids)) == 2
        assert store.get_connection('dup').target_id == 'b'

    @pytest.mark.parametrize('bad_node', [
        {'id': 'b', 'type': 'webhook'},
        {'type': 'message'},
        {'id': 'b', 'type': 'message', 'x': 'left'},
    ])
    def test_failed_load_keeps_current_flow(self, demo_store, bad_node):
        demo_store.select('2')
        with pytest.raises((KeyError, ValueError)):
            demo_store.load_dict({'nodes': [{'id': 'a', 'type': 'trigger'}, bad_node]})

        assert [n.id for n in demo_store.nodes] == ['1', '2']
        assert demo_store.get_connection('c1') is not None
        assert demo_store.selected_id == '2'
