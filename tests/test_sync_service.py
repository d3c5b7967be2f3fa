import threading
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from practice_tracker.celery.tasks.sync import sync_all_users_progress_task
from practice_tracker.clients import GfgClient, LeetCodeClient
from practice_tracker.models import UserRole
from practice_tracker.services import progress_service, sync_service
from practice_tracker.utils.errors import MissingUsernameError, UpstreamUnavailableError
from tests.api_base import ApiTestCase, DatabaseTestCase

ENDPOINT = "https://api.example/{username}"

GFG_PAYLOAD = {
    "info": {"userName": "alice_gfg", "totalProblemsSolved": 2},
    "solvedStats": {
        "school": {"count": 1, "questions": [
            {"question": "Reverse a linked list",
             "questionUrl": "https://www.geeksforgeeks.org/problems/reverse-a-linked-list/1"},
        ]},
        "easy": {"count": 1, "questions": [
            {"question": "Two Sum", "questionUrl": "https://practice.geeksforgeeks.org/problems/two-sum/0"},
        ]},
    },
}

LEETCODE_PAYLOAD = {
    "count": 2,
    "submission": [
        {"title": "Two Sum", "titleSlug": "two-sum", "statusDisplay": "Accepted"},
        {"title": "Valid Parentheses", "titleSlug": "valid-parentheses", "statusDisplay": "Accepted"},
        {"title": "Two Sum", "titleSlug": "two-sum", "statusDisplay": "Accepted"},
    ],
}


def scripted_client(cls, *responses):
    """Client whose transport answers with ``responses`` in order and records every URL."""
    answers = list(responses)
    requests = []

    def handler(request):
        requests.append(str(request.url))
        return answers.pop(0)

    client = cls([ENDPOINT], attempts=1, retry_delay=0, timeout=1, transport=httpx.MockTransport(handler))
    return client, requests


class SyncTestCase(DatabaseTestCase, unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        super().setUp()
        self.two_sum_gfg = self.create_question("Two Sum", "https://www.geeksforgeeks.org/problems/two-sum-1587115621/1")
        self.reverse_gfg = self.create_question("Reverse a linked list",
                                                "https://www.geeksforgeeks.org/problems/reverse-a-linked-list/1")
        self.unsolved_gfg = self.create_question("Kadane", "https://www.geeksforgeeks.org/problems/kadanes-algorithm-1587115620/1")
        self.two_sum_lc = self.create_question("Two Sum", "https://leetcode.com/problems/two-sum/")
        self.parens_lc = self.create_question("Valid Parentheses",
                                              "https://leetcode.com/problems/valid-parentheses/description/")
        self.lru_lc = self.create_question("LRU Cache", "https://leetcode.com/problems/lru-cache/")

    def solved_ids(self, user_id):
        return sorted(p.question_id for p in self.progress_rows(user_id) if p.is_solved)


class TestGfgSync(SyncTestCase):

    async def test_matches_solved_urls_and_marks_progress(self):
        user = self.create_user("alice", geeksforgeeks_username="alice_gfg")
        client, requests = scripted_client(GfgClient, httpx.Response(200, json=GFG_PAYLOAD))

        result = await sync_service.sync_gfg_progress(self.db, user.id, client)

        self.assertTrue(result.success)
        self.assertEqual(result.message, "GFG progress synchronized successfully")
        self.assertEqual(result.stats.total_questions, 3)
        self.assertEqual(result.stats.total_gfg_questions, 3)
        self.assertEqual(result.stats.solved_questions, 2)
        self.assertEqual(result.stats.updated_questions, 2)
        self.assertEqual(result.stats.newly_solved, 2)
        self.assertEqual(requests, ["https://api.example/alice_gfg"])
        self.assertEqual(self.solved_ids(user.id), sorted([self.two_sum_gfg.id, self.reverse_gfg.id]))

    async def test_missing_username_fails_before_any_request(self):
        user = self.create_user("alice")
        client, requests = scripted_client(GfgClient)
        with self.assertRaises(MissingUsernameError) as ctx:
            await sync_service.sync_gfg_progress(self.db, user.id, client)
        self.assertEqual(ctx.exception.detail,
                         "GeeksforGeeks username not set. Please add it in your profile first.")
        self.assertEqual(requests, [])

    async def test_upstream_failure_writes_nothing(self):
        user = self.create_user("alice", geeksforgeeks_username="alice_gfg")
        client, _ = scripted_client(GfgClient, httpx.Response(502))
        with self.assertRaises(UpstreamUnavailableError):
            await sync_service.sync_gfg_progress(self.db, user.id, client)
        self.assertEqual(self.progress_rows(user.id), [])

    async def test_sync_never_unsolves(self):
        user = self.create_user("alice", geeksforgeeks_username="alice_gfg")
        progress_service.upsert_progress(self.db, user.id, self.unsolved_gfg.id, True)
        progress_service.upsert_progress(self.db, user.id, self.two_sum_gfg.id, True)
        client, _ = scripted_client(GfgClient, httpx.Response(200, json=GFG_PAYLOAD))

        result = await sync_service.sync_gfg_progress(self.db, user.id, client)

        self.assertEqual(result.stats.updated_questions, 2)
        self.assertEqual(result.stats.newly_solved, 1)
        self.assertEqual(self.solved_ids(user.id),
                         sorted([self.two_sum_gfg.id, self.reverse_gfg.id, self.unsolved_gfg.id]))

    async def test_unrecognized_payload_is_not_an_error(self):
        user = self.create_user("alice", geeksforgeeks_username="alice_gfg")
        client, _ = scripted_client(GfgClient, httpx.Response(200, json={"profile": {"name": "alice"}}))
        result = await sync_service.sync_gfg_progress(self.db, user.id, client)
        self.assertTrue(result.success)
        self.assertEqual(result.stats.solved_questions, 0)
        self.assertEqual(self.progress_rows(user.id), [])


class TestLeetCodeSync(SyncTestCase):

    async def test_matches_by_slug(self):
        user = self.create_user("bob", leetcode_username="bob_lc")
        client, _ = scripted_client(LeetCodeClient, httpx.Response(200, json=LEETCODE_PAYLOAD))

        result = await sync_service.sync_leetcode_progress(self.db, user.id, client)

        self.assertEqual(result.message, "LeetCode progress synchronized successfully")
        self.assertEqual(result.stats.total_leetcode_questions, 3)
        self.assertEqual(result.stats.solved_questions, 2)
        self.assertEqual(result.stats.match_strategies, {"slug": 2})
        self.assertEqual(self.solved_ids(user.id), sorted([self.two_sum_lc.id, self.parens_lc.id]))

    async def test_stats_only_payload_reports_no_matches(self):
        user = self.create_user("bob", leetcode_username="bob_lc")
        client, _ = scripted_client(LeetCodeClient,
                                    httpx.Response(200, json={"totalSolved": 42, "easySolved": 20}))

        result = await sync_service.sync_leetcode_progress(self.db, user.id, client)

        self.assertTrue(result.success)
        self.assertIn("42 solved", result.message)
        self.assertEqual(result.stats.solved_questions, 0)
        self.assertEqual(self.progress_rows(user.id), [])

    async def test_partial_matches_can_be_disabled(self):
        user = self.create_user("bob", leetcode_username="bob_lc")
        payload = {"submission": [{"title": "LRU Cache Implementation", "titleSlug": ""}]}

        client, _ = scripted_client(LeetCodeClient, httpx.Response(200, json=payload))
        with patch.object(sync_service.settings, "LEETCODE_ALLOW_PARTIAL_MATCH", False):
            result = await sync_service.sync_leetcode_progress(self.db, user.id, client)
        self.assertEqual(result.stats.solved_questions, 0)

        client, _ = scripted_client(LeetCodeClient, httpx.Response(200, json=payload))
        result = await sync_service.sync_leetcode_progress(self.db, user.id, client)
        self.assertEqual(result.stats.solved_questions, 1)
        self.assertEqual(result.stats.match_strategies, {"slug_in_title": 1})


class TestSyncAll(SyncTestCase):

    async def test_one_platform_failing_does_not_fail_the_other(self):
        user = self.create_user("bob", leetcode_username="bob_lc")
        gfg_client, gfg_requests = scripted_client(GfgClient)
        lc_client, _ = scripted_client(LeetCodeClient, httpx.Response(200, json=LEETCODE_PAYLOAD))

        result = await sync_service.sync_all_progress(self.db, user.id, gfg_client, lc_client)

        self.assertFalse(result.results["gfg"].success)
        self.assertIn("username not set", result.results["gfg"].error)
        self.assertTrue(result.results["leetcode"].success)
        self.assertEqual(result.results["leetcode"].stats.solved_questions, 2)
        self.assertEqual(gfg_requests, [])

    async def test_bulk_sync_batches_and_collects_failures(self):
        self.create_user("root", role=UserRole.admin)
        users = [self.create_user(name) for name in ("alice", "bob", "carol")]
        real_sync_all = sync_service.sync_all_progress
        on_batch = MagicMock()
        sessions = []

        async def flaky_sync_all(db, user_id, *clients):
            sessions.append(db)
            if user_id == users[1].id:
                raise RuntimeError("database went away")
            return await real_sync_all(db, user_id, *clients)

        with patch.object(sync_service, "sync_all_progress", side_effect=flaky_sync_all), \
                patch("practice_tracker.services.sync_service.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await sync_service.sync_all_users_progress(self.db, batch_size=2, batch_delay=0.5,
                                                                 on_batch=on_batch)

        self.assertEqual(result.total_users, 3)
        self.assertEqual(result.processed, 2)
        self.assertEqual(result.failed, 1)
        self.assertEqual([s.username for s in result.results], ["alice", "carol"])
        self.assertEqual(result.failures[0].username, "bob")
        self.assertEqual(result.failures[0].error, "database went away")
        sleep.assert_awaited_once_with(0.5)
        self.assertEqual([c.args for c in on_batch.call_args_list], [(2, 3), (3, 3)])
        self.assertEqual(len(set(map(id, sessions))), 3)
        self.assertNotIn(self.db, sessions)

    async def test_bulk_sync_counts_users_whose_platforms_all_failed(self):
        alice = self.create_user("alice", geeksforgeeks_username="alice_gfg", leetcode_username="alice_lc")
        self.create_user("bob", geeksforgeeks_username="bob_gfg", leetcode_username="bob_lc")
        self.create_user("carol")
        gfg_client, _ = scripted_client(GfgClient, httpx.Response(500), httpx.Response(500))
        lc_client, _ = scripted_client(LeetCodeClient, httpx.Response(500), httpx.Response(500))

        result = await sync_service.sync_all_users_progress(self.db, batch_size=5, gfg_client=gfg_client,
                                                             leetcode_client=lc_client)

        self.assertEqual(result.total_users, 3)
        self.assertEqual(result.failed, 2)
        self.assertEqual(result.processed, 1)
        self.assertEqual(result.message, "Synced progress for 1 of 3 users")
        self.assertEqual([s.username for s in result.results], ["carol"])
        self.assertTrue(all(o.skipped for o in result.results[0].results.values()))
        failure = next(f for f in result.failures if f.user_id == alice.id)
        self.assertIn("gfg: Failed to fetch GeeksforGeeks data: HTTP 500", failure.error)
        self.assertIn("leetcode: ", failure.error)

    async def test_database_work_runs_off_the_event_loop(self):
        user = self.create_user("bob", leetcode_username="bob_lc")
        client, _ = scripted_client(LeetCodeClient, httpx.Response(200, json=LEETCODE_PAYLOAD))
        real_upsert = progress_service.upsert_progress
        threads = []

        def recording_upsert(*args, **kwargs):
            threads.append(threading.get_ident())
            return real_upsert(*args, **kwargs)

        with patch.object(progress_service, "upsert_progress", side_effect=recording_upsert):
            await sync_service.sync_leetcode_progress(self.db, user.id, client)

        self.assertEqual(len(threads), 2)
        self.assertNotIn(threading.get_ident(), threads)


class TestSyncTask(DatabaseTestCase):

    def test_task_runs_bulk_sync(self):
        self.create_user("alice")
        result = sync_all_users_progress_task.apply().get()
        self.assertEqual(result["totalUsers"], 1)
        self.assertEqual(result["processed"], 1)
        self.assertFalse(result["results"][0]["results"]["gfg"]["success"])


class TestSyncApi(ApiTestCase):

    def test_upstream_outage_is_a_503_with_suggestion(self):
        user = self.create_user("alice", geeksforgeeks_username="alice_gfg")
        client, _ = scripted_client(GfgClient, httpx.Response(500))
        with patch("practice_tracker.services.sync_service.GfgClient.from_settings", return_value=client):
            response = self.client.get(f"/api/sync-gfg-progress/{user.id}", headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 503)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"], "Failed to fetch GeeksforGeeks data: HTTP 500")
        self.assertIn("suggestion", body)

    def test_sync_response_uses_platform_named_totals(self):
        user = self.create_user("bob", leetcode_username="bob_lc")
        client, _ = scripted_client(LeetCodeClient, httpx.Response(200, json=LEETCODE_PAYLOAD))
        with patch("practice_tracker.services.sync_service.LeetCodeClient.from_settings", return_value=client):
            response = self.client.get(f"/api/sync-leetcode-progress/{user.id}", headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 200)
        stats = response.json()["stats"]
        self.assertEqual(stats["totalLeetCodeQuestions"], 0)
        self.assertNotIn("totalGFGQuestions", stats)

    def test_missing_username_is_a_400(self):
        user = self.create_user("alice")
        response = self.client.get(f"/api/sync-leetcode-progress/{user.id}", headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "LeetCode username not set. Please add it in your profile first.")

    def test_users_cannot_sync_someone_else(self):
        alice = self.create_user("alice")
        bob = self.create_user("bob", geeksforgeeks_username="bob_gfg")
        response = self.client.get(f"/api/sync-all-progress/{bob.id}", headers=self.auth_headers(alice))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.get(f"/api/sync-all-progress/{bob.id}").status_code, 401)

    def test_bulk_sync_requires_admin(self):
        user = self.create_user("alice")
        response = self.client.post("/api/sync-all-users-progress", headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 403)

    def test_bulk_sync_inline(self):
        self.create_user("alice")
        response = self.client.post("/api/sync-all-users-progress", headers=self.admin_headers())
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["totalUsers"], 1)
        self.assertEqual(body["results"][0]["username"], "alice")

    def test_bulk_sync_in_background(self):
        with patch("practice_tracker.api.sync_api.sync_all_users_progress_task") as task:
            task.delay.return_value = MagicMock(id="task-1")
            response = self.client.post("/api/sync-all-users-progress", params={"background": "true"},
                                        headers=self.admin_headers())
        task.delay.assert_called_once_with()
        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json(), {"taskId": "task-1", "status": "PENDING",
                                           "message": "Bulk progress sync started"})

    def test_task_status(self):
        finished = MagicMock(state="SUCCESS", result={"processed": 3})
        with patch("practice_tracker.api.sync_api.AsyncResult", return_value=finished):
            response = self.client.get("/api/sync-tasks/task-1", headers=self.admin_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"taskId": "task-1", "status": "SUCCESS", "result": {"processed": 3}})

    def test_task_status_reports_batch_progress(self):
        running = MagicMock(state="PROGRESS", info={"processed": 5, "total": 10, "percentage": 50})
        with patch("practice_tracker.api.sync_api.AsyncResult", return_value=running):
            body = self.client.get("/api/sync-tasks/task-1", headers=self.admin_headers()).json()
        self.assertEqual(body["status"], "PROGRESS")
        self.assertEqual(body["progress"]["percentage"], 50)


if __name__ == '__main__':
    unittest.main()
