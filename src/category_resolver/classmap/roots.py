"""
Curated root classes per category.

Order matters: when two roots share descendants, the class keeps the category
of the root listed first. More specific roots therefore precede broad ones
(e.g. religious building before organization).
"""

from __future__ import annotations

from typing import List, NamedTuple

from ..core.categories import Category


class RootClass(NamedTuple):
    class_id: str
    category: Category
    label: str
    limit: int = 5000


ROOT_CLASSES: List[RootClass] = [
    # People
    RootClass("Q5", Category.PEOPLE, "human", 100),
    RootClass("Q215627", Category.PEOPLE, "person", 2000),

    # Religion
    RootClass("Q9174", Category.RELIGION, "religion", 3000),
    RootClass("Q24398318", Category.RELIGION, "religious building", 3000),
    RootClass("Q16970", Category.RELIGION, "church building", 2000),
    RootClass("Q44613", Category.RELIGION, "monastery", 1000),
    RootClass("Q1530022", Category.RELIGION, "religious organization", 3000),
    RootClass("Q879146", Category.RELIGION, "Christian denomination", 1000),

    # History
    RootClass("Q198", Category.HISTORY, "war", 2000),
    RootClass("Q178561", Category.HISTORY, "battle", 2000),
    RootClass("Q48349", Category.HISTORY, "empire", 500),
    RootClass("Q3024240", Category.HISTORY, "historical country", 1500),
    RootClass("Q11514315", Category.HISTORY, "historical period", 1500),
    RootClass("Q13418847", Category.HISTORY, "historical event", 3000),

    # Government
    RootClass("Q40231", Category.GOVERNMENT, "election", 3000),
    RootClass("Q7278", Category.GOVERNMENT, "political party", 1000),
    RootClass("Q327333", Category.GOVERNMENT, "government agency", 2000),
    RootClass("Q35749", Category.GOVERNMENT, "parliament", 500),
    RootClass("Q7188", Category.GOVERNMENT, "government", 1000),

    # Law
    RootClass("Q41487", Category.LAW, "court", 1000),
    RootClass("Q820655", Category.LAW, "statute", 2000),
    RootClass("Q131569", Category.LAW, "treaty", 1000),
    RootClass("Q83267", Category.LAW, "crime", 1500),
    RootClass("Q7748", Category.LAW, "law", 3000),

    # Education
    RootClass("Q3918", Category.EDUCATION, "university", 1000),
    RootClass("Q189004", Category.EDUCATION, "college", 500),
    RootClass("Q3914", Category.EDUCATION, "school", 2000),
    RootClass("Q2385804", Category.EDUCATION, "educational institution", 3000),

    # Language
    RootClass("Q34770", Category.LANGUAGE, "language", 5000),
    RootClass("Q25295", Category.LANGUAGE, "language family", 1000),
    RootClass("Q33384", Category.LANGUAGE, "dialect", 1000),
    RootClass("Q8192", Category.LANGUAGE, "writing system", 1000),

    # Philosophy
    RootClass("Q5891", Category.PHILOSOPHY, "philosophy", 1000),
    RootClass("Q2198855", Category.PHILOSOPHY, "philosophical movement", 1000),

    # Culture
    RootClass("Q132241", Category.CULTURE, "festival", 1500),
    RootClass("Q9134", Category.CULTURE, "mythology", 500),
    RootClass("Q11042", Category.CULTURE, "culture", 1000),

    # Humanities
    RootClass("Q80083", Category.HUMANITIES, "humanities", 1000),
    RootClass("Q7725634", Category.HUMANITIES, "literary work", 2000),

    # Society
    RootClass("Q49773", Category.SOCIETY, "social movement", 1000),
    RootClass("Q41710", Category.SOCIETY, "ethnic group", 2000),
    RootClass("Q43229", Category.SOCIETY, "organization", 5000),

    # Geography (broad roots last; many concepts are also places)
    RootClass("Q515", Category.GEOGRAPHY, "city", 3000),
    RootClass("Q6256", Category.GEOGRAPHY, "country", 500),
    RootClass("Q23442", Category.GEOGRAPHY, "island", 2000),
    RootClass("Q8502", Category.GEOGRAPHY, "mountain", 2000),
    RootClass("Q4022", Category.GEOGRAPHY, "river", 2000),
    RootClass("Q23397", Category.GEOGRAPHY, "lake", 1000),
    RootClass("Q165", Category.GEOGRAPHY, "sea", 500),
    RootClass("Q486972", Category.GEOGRAPHY, "human settlement", 8000),
    RootClass("Q56061", Category.GEOGRAPHY, "administrative territorial entity", 8000),
    RootClass("Q82794", Category.GEOGRAPHY, "geographic region", 5000),
]
