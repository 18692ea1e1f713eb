from decimal import Decimal
import unittest

from moviechat.chart_planner import analyze_for_visualization, parse_visualization
from fakes import FakeModel


ROWS = [
    {"genre": "Action", "avg_rating": Decimal("8.3"), "movie_count": 4},
    {"genre": "Drama", "avg_rating": Decimal("8.4"), "movie_count": 2},
]
SQL = "SELECT genre, AVG(rating) as avg_rating, COUNT(*) as movie_count FROM movies GROUP BY genre;"


class VisualizationAdvisorTests(unittest.TestCase):
    def test_empty_rows_skip_the_model(self):
        model = FakeModel()

        self.assertIsNone(analyze_for_visualization(model, SQL, []))
        self.assertIsNone(analyze_for_visualization(model, SQL, None))
        self.assertEqual(model.prompts, [])

    def test_parses_json_embedded_in_prose(self):
        model = FakeModel(
            "Sure! Here is the analysis:\n```json\n"
            '{"canVisualize": true, "chartType": "bar", "xField": "genre", '
            '"yField": "avg_rating", "title": "Average Rating by Genre"}\n```'
        )

        rec = analyze_for_visualization(model, SQL, ROWS)

        self.assertIsNotNone(rec)
        self.assertTrue(rec.can_visualize)
        self.assertEqual(rec.chart_type, "bar")
        self.assertEqual(rec.x_field, "genre")
        self.assertEqual(rec.y_field, "avg_rating")
        self.assertEqual(
            rec.model_dump(by_alias=True),
            {
                "canVisualize": True,
                "chartType": "bar",
                "xField": "genre",
                "yField": "avg_rating",
                "title": "Average Rating by Genre",
            },
        )

    def test_prompt_includes_sample_row_and_total(self):
        model = FakeModel('{"canVisualize": false, "chartType": null, "xField": null, "yField": null, "title": null}')

        analyze_for_visualization(model, SQL, ROWS)

        prompt = model.prompts[0]
        self.assertIn(f"SQL: {SQL}", prompt)
        self.assertIn('Sample Result: {"genre": "Action", "avg_rating": 8.3, "movie_count": 4}', prompt)
        self.assertIn("Total Rows: 2", prompt)
        self.assertIn('"bar" for comparisons, "pie" for parts of whole, "line" for trends', prompt)

    def test_model_failure_returns_none(self):
        model = FakeModel(RuntimeError("quota exceeded"))

        self.assertIsNone(analyze_for_visualization(model, SQL, ROWS))

    def test_malformed_answers_return_none(self):
        for text in (
            "no json here",
            "{canVisualize: true,}",
            '{"chartType": "bar"}',
            '{"canVisualize": true, "chartType": "scatter"}',
        ):
            with self.subTest(text=text):
                self.assertIsNone(parse_visualization(text))


if __name__ == "__main__":
    unittest.main()
