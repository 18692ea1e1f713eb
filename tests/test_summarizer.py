import json

from moviechat.summarizer import summarize_results
from fakes import FakeModel


def test_summary_prompt_uses_request_and_first_ten_rows():
    rows = [{"title": f"Movie {i}", "year": 2000 + i} for i in range(15)]
    model = FakeModel("  Fifteen movies were found.  ")

    summary = summarize_results(model, "List all movies", rows)

    assert summary == "Fifteen movies were found."
    prompt = model.prompts[0]
    assert prompt.startswith("User request: List all movies\n\nMovie data: ")
    data = json.loads(prompt.split("Movie data: ", 1)[1].split("\n\n", 1)[0])
    assert len(data) == 10
    assert data[-1]["title"] == "Movie 9"


def test_summary_failure_returns_none():
    model = FakeModel(RuntimeError("model unavailable"))

    assert summarize_results(model, "List all movies", [{"title": "RRR"}]) is None
