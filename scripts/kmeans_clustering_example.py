"""Toy K-means topic clustering over a hard-coded meeting transcript.

Educational only: nothing in ``minutesai_backend`` imports this script.

Each transcript line is lower-cased, stripped of punctuation and turned into
a binary bag-of-words vector. K-means then groups the vectors; the groups can
be read as the topics discussed. Bag-of-words has no notion of meaning ("car"
and "automobile" are unrelated words to it), so a real implementation would
use embedding vectors from a language model instead.
"""

from __future__ import annotations

import argparse
import math
import re
import string
from typing import Sequence

SAMPLE_TRANSCRIPT = """
  Sarah: The new ad designs for the campaign are ready for review.
  Tom: I am concerned about the color palette on the Facebook ads.
  Maya: The blog post about our top 10 features is halfway done.
  Sarah: We need to finalize the launch date for the marketing campaign.
  Tom: The visuals for Instagram look solid, the colors work well there.
  Maya: I will finish the draft of the blog post by this Friday.
"""

_PUNCTUATION = re.compile(r"[^\w\s]")


def split_sentences(transcript: str) -> list[str]:
    """One cleaned sentence per non-empty line."""
    sentences = []
    for line in transcript.split("\n"):
        stripped = line.strip()
        if stripped:
            sentences.append(_PUNCTUATION.sub("", stripped.lower()))
    return sentences


def build_vocabulary(sentences: Sequence[str]) -> list[str]:
    """Unique words in first-seen order."""
    vocabulary: dict[str, None] = {}
    for word in " ".join(sentences).split(" "):
        if word:
            vocabulary.setdefault(word)
    return list(vocabulary)


def vectorize(sentences: Sequence[str], vocabulary: Sequence[str]) -> list[list[int]]:
    vectors = []
    for sentence in sentences:
        words = set(sentence.split(" "))
        vectors.append([1 if word in words else 0 for word in vocabulary])
    return vectors


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


def kmeans(data: Sequence[Sequence[float]], k: int) -> list[int]:
    """Cluster ``data`` into ``k`` groups, seeding centroids with the first k points.

    Iterates until no assignment changes. With fewer points than clusters every
    point gets its own cluster.
    """
    if len(data) < k:
        return list(range(len(data)))

    centroids = [list(point) for point in data[:k]]
    assignments: list[int] = []

    while True:
        new_assignments = []
        for point in data:
            distances = [euclidean_distance(point, centroid) for centroid in centroids]
            new_assignments.append(distances.index(min(distances)))

        if new_assignments == assignments:
            return assignments
        assignments = new_assignments

        for cluster in range(k):
            members = [
                point
                for point, assigned in zip(data, assignments)
                if assigned == cluster
            ]
            if members:
                centroids[cluster] = [
                    sum(values) / len(members) for values in zip(*members)
                ]


def cluster_transcript(transcript: str, k: int) -> list[list[str]]:
    """Return the sentences of ``transcript`` grouped into ``k`` clusters."""
    sentences = split_sentences(transcript)
    vectors = vectorize(sentences, build_vocabulary(sentences))
    assignments = kmeans(vectors, k)

    clusters: list[list[str]] = [[] for _ in range(k)]
    for sentence, cluster in zip(sentences, assignments):
        clusters[cluster].append(sentence)
    return clusters


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Cluster the sample transcript into topics with K-means.",
    )
    parser.add_argument(
        "--clusters", type=int, default=2, help="Number of topics to look for."
    )
    args = parser.parse_args(argv)
    if args.clusters < 1:
        parser.error("--clusters must be at least 1")

    sentences = split_sentences(SAMPLE_TRANSCRIPT)
    print("--- K-Means Clustering Example ---")
    print("Original Sentences:", sentences)

    clusters = cluster_transcript(SAMPLE_TRANSCRIPT, args.clusters)
    for index, members in enumerate(clusters):
        label = string.ascii_uppercase[index % 26]
        print(f"\n--- Cluster {index + 1} (Topic {label}) ---")
        for sentence in members:
            print(f'  - "{sentence}"')
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
