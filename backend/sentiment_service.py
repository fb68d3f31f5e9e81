# sentiment_service.py
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

analyzer = SentimentIntensityAnalyzer()


def sentiment_score(text: str) -> float:
    """VADER compound score in [-1, 1], stored next to the AI mood label."""
    return analyzer.polarity_scores(text or "")["compound"]


def score_label(score) -> str:
    if score is None:
        return ""
    if score >= 0.05:
        return "positive"
    if score <= -0.05:
        return "negative"
    return "neutral"
