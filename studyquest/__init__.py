"""StudyQuest progression core: levels, achievements, shop economy and quiz sessions"""

__version__ = "0.1.0"
