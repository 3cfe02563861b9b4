import unittest

from access_control import AccessController, AuthorizationRecord
from guarded_contract import StorageContract
from guarded_graph import build_guarded_graph, initial_state
from guarded_tools import storage_tools


class TestGuardedTools(unittest.TestCase):

    def setUp(self):
        self.controller = AccessController([AuthorizationRecord("G1", ["a@node1"])])
        self.storage = StorageContract()

    def test_authorized_tools(self):
        store, retrieve = storage_tools(self.storage, self.controller, "G1", "a@node1")
        self.assertEqual(store.invoke({"num": 5})["status"], "SUCCESS")
        self.assertEqual(retrieve.invoke({})["value"], 5)

    def test_unauthorized_tools(self):
        store, retrieve = storage_tools(self.storage, self.controller, "G1", "b@node1")
        result = store.invoke({"num": 5})
        self.assertEqual(result["status"], "DENIED")
        self.assertFalse(result["proof"]["identity_authorized"])
        self.assertEqual(self.storage.value, 0)
        self.assertEqual(retrieve.invoke({})["status"], "DENIED")


class TestGuardedGraph(unittest.TestCase):

    def setUp(self):
        controller = AccessController([AuthorizationRecord("G1", ["a@node1", "b@node2"])])
        self.app = build_guarded_graph(controller)

    def test_allowed_path(self):
        state = self.app.invoke(initial_state("G1", "b@node2", "WRITE"))
        self.assertFalse(state["blocked"])
        self.assertEqual(state["result"]["status"], "SUCCESS")
        self.assertTrue(state["last_proof"]["allowed"])

    def test_blocked_path(self):
        state = self.app.invoke(initial_state("G1", "c@node3", "READ"))
        self.assertTrue(state["blocked"])
        self.assertEqual(state["result"]["status"], "DENIED")
        self.assertEqual(state["result"]["reason"], {"known_operation": True, "identity_authorized": False})

    def test_executor_runs_only_when_allowed(self):
        calls = []
        controller = AccessController([AuthorizationRecord("G1", ["a@node1"])])
        app = build_guarded_graph(controller, executor=lambda s: calls.append(s["identity"]) or "done")
        app.invoke(initial_state("G1", "z@node1", "READ"))
        state = app.invoke(initial_state("G1", "a@node1", "READ"))
        self.assertEqual(calls, ["a@node1"])
        self.assertEqual(state["result"], "done")


if __name__ == '__main__':
    unittest.main()
