import logging
from typing import FrozenSet, List, Sequence

logger = logging.getLogger(__name__)

DEFAULT_NGRAM_SIZE = 3
DEFAULT_THRESHOLD = 0.7

# -------------------------------
# Set utilities
# -------------------------------

def jaccard(set_a: FrozenSet[str], set_b: FrozenSet[str]) -> float:
    union = len(set_a | set_b)
    if union == 0:
        return 0.0
    return len(set_a & set_b) / union


def extract_ngrams(words: Sequence[str], n: int) -> FrozenSet[str]:
    """Set of n-grams of consecutive words, each joined by a single space."""
    return frozenset(
        " ".join(words[i:i + n])
        for i in range(len(words) - n + 1)
    )

# -------------------------------
# Text similarity
# -------------------------------

class TextAnalyzer:
    """
    Compares two normalized texts.

    The score is a set-based Jaccard index over word n-grams, or over plain
    words when either text is too short to form an n-gram. The threshold is
    only used by is_match and never changes the score.
    """

    def __init__(self, ngram_size: int = DEFAULT_NGRAM_SIZE, threshold: float = DEFAULT_THRESHOLD):
        if ngram_size < 2:
            ngram_size = DEFAULT_NGRAM_SIZE
        if threshold <= 0:
            threshold = DEFAULT_THRESHOLD

        self.ngram_size = ngram_size
        self.threshold = threshold

    def compare(self, text_a: str, text_b: str) -> float:
        """Similarity of two normalized texts in [0, 1]."""
        words_a = text_a.split()
        words_b = text_b.split()

        if not words_a or not words_b:
            return 0.0

        if len(words_a) < self.ngram_size or len(words_b) < self.ngram_size:
            logger.debug("Text shorter than n-gram size, using word-level comparison")
            return jaccard(frozenset(words_a), frozenset(words_b))

        return jaccard(
            extract_ngrams(words_a, self.ngram_size),
            extract_ngrams(words_b, self.ngram_size),
        )

    def is_match(self, similarity: float) -> bool:
        """Whether a similarity score counts as plagiarism."""
        return similarity >= self.threshold

    def find_common_sections(self, text_a: str, text_b: str, min_words: int) -> List[str]:
        """
        Runs of at least min_words identical consecutive words present in both texts.
        Scans text_a left to right and skips past every section found.
        """
        words_a = text_a.split()
        words_b = text_b.split()

        sections = []
        i = 0
        while i < len(words_a):
            advanced = False
            for j in range(len(words_b)):
                k = 0
                while (
                    i + k < len(words_a) and j + k < len(words_b) and
                    words_a[i + k] == words_b[j + k]
                ):
                    k += 1

                if k >= min_words:
                    sections.append(" ".join(words_a[i:i + k]))
                    i += k
                    advanced = True
                    break

            if not advanced:
                i += 1

        return sections
