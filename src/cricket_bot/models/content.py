"""Content models for the publication API and the fixed topic menu."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PublicationSummary:
    """Headline data of one publication, used only to compose a reply."""

    title: str
    subtitle: str
    url: str


@dataclass(frozen=True)
class Topic:
    """A latest-news topic offered as a quick reply."""

    payload: str
    title: str
    filter: str


TOPICS: tuple[Topic, ...] = (
    Topic("LATEST_CRICKET_PAYLOAD", "Cricket", "sport/cricket"),
    Topic("LATEST_SCORCHERS_PAYLOAD", "Scorchers", "sport/perth-scorchers"),
    Topic("LATEST_WOMENS_PAYLOAD", "Women’s Cricket", "sport/womens-cricket"),
    Topic("LATEST_AUST_PAYLOAD", "Australian Cricket Team", "sport/australian-cricket-team"),
    Topic("LATEST_ASHES_PAYLOAD", "The Ashes", "sport/the-ashes"),
    Topic("LATEST_BBL_PAYLOAD", "Big Bash League", "sport/big-bash-league"),
    Topic("LATEST_WORLD_PAYLOAD", "Cricket World Cup", "sport/cricket-world-cup"),
    Topic("LATEST_IPL_PAYLOAD", "Indian Premier League", "sport/indian-premier-league"),
)

TOPICS_BY_PAYLOAD: dict[str, Topic] = {t.payload: t for t in TOPICS}
