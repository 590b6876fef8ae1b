"""QuizApiClient against an in-process httpx transport."""

from conftest import make_snapshot
import httpx
import pytest

from quiz_live.api.quiz_api_client import QuizApiClient, QuizApiError


def make_client(routes: dict, status_code: int = 200, seen: list | None = None) -> QuizApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        path = request.url.path
        if path not in routes:
            return httpx.Response(404, json={"success": False})
        return httpx.Response(status_code, json=routes[path])

    return QuizApiClient(
        base_url="http://quiz.test/api",
        token="secret",
        transport=httpx.MockTransport(handler),
    )


class TestLeaderboard:
    def test_unwraps_data_envelope(self):
        client = make_client(
            {
                "/api/quizzes/7/leaderboard": {
                    "success": True,
                    "data": {"leaderboard": [{"user_id": 42, "score": 90}, {"user_id": "7", "score": 80}]},
                }
            }
        )
        entries = client.get_leaderboard(7)

        assert [entry.user_id for entry in entries] == [42, "7"]
        assert entries[0].score == 90

    def test_sends_bearer_token(self):
        seen = []
        client = make_client({"/api/quizzes/7/leaderboard": {"data": {"leaderboard": []}}}, seen=seen)
        client.get_leaderboard(7)

        assert seen[0].headers["Authorization"] == "Bearer secret"

    def test_malformed_entries_raise(self):
        client = make_client({"/api/quizzes/7/leaderboard": {"data": {"leaderboard": [{"score": 1}]}}})
        with pytest.raises(QuizApiError):
            client.get_leaderboard(7)


class TestDuration:
    def test_nested_quiz_duration(self):
        client = make_client({"/api/quizzes/7": {"data": {"quiz": {"duration": 45}}}})
        assert client.get_quiz_duration_minutes(7) == 45

    def test_flat_duration(self):
        client = make_client({"/api/quizzes/7": {"data": {"duration": 20}}})
        assert client.get_quiz_duration_minutes(7) == 20

    def test_missing_duration_defaults_to_an_hour(self):
        client = make_client({"/api/quizzes/7": {"data": {"quiz": {"title": "Algebra"}}}})
        assert client.get_quiz_duration_minutes(7) == 60

    def test_invalid_duration_raises(self):
        client = make_client({"/api/quizzes/7": {"data": {"duration": "soon"}}})
        with pytest.raises(QuizApiError):
            client.get_quiz_duration_minutes(7)


class TestErrors:
    def test_http_error_status(self):
        client = make_client({"/api/quizzes/7": {"data": {}}}, status_code=500)
        with pytest.raises(QuizApiError, match="500"):
            client.get_quiz_duration_minutes(7)

    def test_not_found(self):
        client = make_client({})
        with pytest.raises(QuizApiError):
            client.get_questions(7)


def test_questions():
    client = make_client(
        {"/api/quizzes/7/questions": {"data": {"questions": [{"question_id": 1, "question_text": "2+2?"}]}}}
    )
    questions = client.get_questions(7)
    assert [question.question_id for question in questions] == [1]


def test_teacher_dashboard_fills_quiz_id():
    payload = make_snapshot()
    del payload["quiz_id"]
    client = make_client({"/api/quizzes/7/teacher/dashboard": {"data": payload}})

    with client:
        snapshot = client.get_teacher_dashboard(7)

    assert snapshot.quiz_id == 7
    assert snapshot.class_metrics.avg_response_time == 8400
