"""Tests for DDX/recommendation dedupe, ordering and the narrative sentences."""


def _ddx(name, level, score=None):
    from radclean.models import DdxItem, Likelihood

    return DdxItem(name=name, likelihood=Likelihood(level), score=score)


def test_dedupe_keeps_highest_likelihood_in_first_seen_order():
    from radclean.engine.ranking import dedupe_differentials

    items = [_ddx("A", "Medium"), _ddx("B", "Low"), _ddx("A", "High"), _ddx("B", "Low", score=9)]
    out = dedupe_differentials(items)
    assert [d.name for d in out] == ["A", "B"]
    assert out[0].likelihood.value == "High"
    # tie keeps the first
    assert out[1].score is None


def test_dedupe_is_idempotent():
    from radclean.engine.ranking import dedupe_differentials

    items = [_ddx("A", "Low"), _ddx("A", "Medium"), _ddx("C", "High")]
    once = dedupe_differentials(items)
    assert dedupe_differentials(once) == once


def test_sort_by_likelihood_then_score():
    from radclean.engine.ranking import sort_differentials

    items = [_ddx("low", "Low", 20), _ddx("mid", "Medium", 1), _ddx("high1", "High", 5), _ddx("high2", "High", 9)]
    assert [d.name for d in sort_differentials(items)] == ["high2", "high1", "mid", "low"]


def test_sort_is_stable_without_scores():
    from radclean.engine.ranking import sort_differentials

    items = [_ddx("x", "Medium"), _ddx("y", "Medium"), _ddx("z", "High")]
    assert [d.name for d in sort_differentials(items)] == ["z", "x", "y"]


def test_recommendations_dedupe_and_urgency_order():
    from radclean.engine.ranking import dedupe_recommendations, sort_recommendations
    from radclean.models import Recommendation, Urgency

    recs = [
        Recommendation(text="plain"),
        Recommendation(text="routine", urgency=Urgency.ROUTINE),
        Recommendation(text="emergent", urgency=Urgency.EMERGENT),
        Recommendation(text="routine", urgency=Urgency.EMERGENT),
    ]
    out = sort_recommendations(dedupe_recommendations(recs))
    assert [r.text for r in out] == ["emergent", "routine", "plain"]
    assert out[1].urgency == Urgency.ROUTINE


def test_cap():
    from radclean.engine.ranking import cap

    assert cap([1, 2, 3], 2) == [1, 2]
    assert cap([1], 5) == [1]


def test_probability_sentence_styles():
    from radclean.engine.language import probability_sentence
    from radclean.models import OutputStyle

    ddx = [_ddx("A", "High"), _ddx("B", "High"), _ddx("C", "Medium"), _ddx("D", "Low")]
    assert probability_sentence(ddx, OutputStyle.DETAILED) == (
        "Primarily A, B; differential includes C; less likely D."
    )
    assert probability_sentence(ddx, OutputStyle.BRIEF) == "Primarily A, B; differential includes C."
    assert probability_sentence([_ddx("C", "Medium")], OutputStyle.BRIEF) == "Differential includes C."
    assert probability_sentence([_ddx("D", "Low")], OutputStyle.BRIEF) == ""


def test_recommendation_sentence():
    from radclean.engine.language import recommendation_sentence
    from radclean.models import Recommendation, Urgency

    recs = [
        Recommendation(text="T", urgency=Urgency.EMERGENT, details=["d1", "d2"]),
        Recommendation(text="U", urgency=Urgency.PRIORITY),
    ]
    assert recommendation_sentence(recs, 5) == "Recommendation: Emergent: T (d1; d2) | Priority: U."
    assert recommendation_sentence(recs, 1) == "Recommendation: Emergent: T (d1; d2)."
    assert recommendation_sentence([], 5) == ""
