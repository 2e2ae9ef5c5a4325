"""Accuracy benchmarking for numeric-token extraction.

Runs the extractor over labeled text samples and compares the emitted
tokens with the expected ones, computing precision, recall, F1, exact-list
accuracy and top-1 accuracy.
"""

import csv
import json
import time
from dataclasses import dataclass, field
from pathlib import Path

from src.extraction.number_extractor import NumberExtractor, token_symbols, token_value
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class TokenMetrics:
    """Token-level counts accumulated over one or more samples."""

    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    exact_lists: int = 0
    top1_matches: int = 0
    samples: int = 0

    @property
    def precision(self) -> float:
        """Fraction of emitted tokens that were expected."""
        denom = self.true_positives + self.false_positives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def recall(self) -> float:
        """Fraction of expected tokens that were emitted."""
        denom = self.true_positives + self.false_negatives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def f1(self) -> float:
        """Harmonic mean of precision and recall."""
        if self.precision + self.recall == 0:
            return 0.0
        return 2 * (self.precision * self.recall) / (self.precision + self.recall)

    @property
    def accuracy(self) -> float:
        """Fraction of samples whose token list matched exactly, in order."""
        if self.samples == 0:
            return 0.0
        return self.exact_lists / self.samples

    @property
    def top1_accuracy(self) -> float:
        """Fraction of samples whose first token was the expected first token."""
        if self.samples == 0:
            return 0.0
        return self.top1_matches / self.samples

    def add(self, other: "TokenMetrics") -> None:
        self.true_positives += other.true_positives
        self.false_positives += other.false_positives
        self.false_negatives += other.false_negatives
        self.exact_lists += other.exact_lists
        self.top1_matches += other.top1_matches
        self.samples += other.samples


@dataclass
class BenchmarkResult:
    """Aggregated benchmark results across all samples.

    Args:
        total_samples: Number of samples in the ground truth.
        evaluated_samples: Number of samples that had a prediction.
        metrics: Token metrics over all evaluated samples.
        sample_metrics: Per-sample metric details.
        avg_processing_time_ms: Average extraction time in milliseconds.
        errors: List of error messages encountered.
    """

    total_samples: int
    evaluated_samples: int
    metrics: TokenMetrics
    sample_metrics: dict[str, TokenMetrics]
    avg_processing_time_ms: float = 0.0
    errors: list[str] = field(default_factory=list)


class Evaluator:
    """Evaluates extracted token lists against expected token lists.

    Tokens match exactly, or fuzzily when they carry the same symbols and
    their numeric values differ by less than the threshold.

    Args:
        fuzzy_threshold: Tolerance for numerical fuzzy matching.
    """

    def __init__(self, fuzzy_threshold: float = 0.01) -> None:
        self.fuzzy_threshold = fuzzy_threshold

    def run(
        self,
        extractor: NumberExtractor,
        ground_truth: dict[str, dict[str, object]],
    ) -> BenchmarkResult:
        """Extract tokens for every sample and evaluate them.

        Args:
            extractor: Extractor under test.
            ground_truth: Mapping of sample name to ``text`` and ``expected``.

        Returns:
            Benchmark results including the average extraction time.
        """
        predictions: dict[str, list[str]] = {}
        elapsed_ms = 0.0
        for name, sample in ground_truth.items():
            start = time.perf_counter()
            predictions[name] = extractor.extract(str(sample.get("text", "")))
            elapsed_ms += (time.perf_counter() - start) * 1000

        result = self.evaluate(predictions, ground_truth)
        if ground_truth:
            result.avg_processing_time_ms = elapsed_ms / len(ground_truth)
        return result

    def evaluate(
        self,
        predictions: dict[str, list[str]],
        ground_truth: dict[str, dict[str, object]],
    ) -> BenchmarkResult:
        """Compare predicted token lists against expected ones.

        Args:
            predictions: Mapping of sample name to emitted tokens.
            ground_truth: Mapping of sample name to ``text`` and ``expected``.

        Returns:
            Aggregated benchmark results with per-sample metrics.
        """
        total = TokenMetrics()
        per_sample: dict[str, TokenMetrics] = {}
        errors: list[str] = []
        missing_count = 0

        for name, sample in ground_truth.items():
            expected = [str(t) for t in sample.get("expected", [])]
            if name not in predictions:
                errors.append(f"Missing prediction for {name}")
                missing_count += 1
                continue

            metrics = self._compare(predictions[name], expected)
            per_sample[name] = metrics
            total.add(metrics)

        return BenchmarkResult(
            total_samples=len(ground_truth),
            evaluated_samples=len(ground_truth) - missing_count,
            metrics=total,
            sample_metrics=per_sample,
            errors=errors,
        )

    def _compare(self, predicted: list[str], expected: list[str]) -> TokenMetrics:
        metrics = TokenMetrics(samples=1)
        unmatched = list(predicted)

        for exp in expected:
            hit = next((p for p in unmatched if self._tokens_match(p, exp)), None)
            if hit is None:
                metrics.false_negatives += 1
            else:
                unmatched.remove(hit)
                metrics.true_positives += 1
        metrics.false_positives = len(unmatched)

        if predicted == expected:
            metrics.exact_lists = 1
        if not expected and not predicted:
            metrics.top1_matches = 1
        elif expected and predicted and self._tokens_match(predicted[0], expected[0]):
            metrics.top1_matches = 1
        return metrics

    def _tokens_match(self, pred: str, expected: str) -> bool:
        """Check if two tokens are the same number with the same symbols.

        Args:
            pred: Emitted token.
            expected: Expected token.

        Returns:
            True if tokens are considered equivalent.
        """
        pred, expected = pred.strip(), expected.strip()
        if pred == expected:
            return True
        if token_symbols(pred) != token_symbols(expected):
            return False

        pred_num = token_value(pred)
        exp_num = token_value(expected)
        if pred_num is None or exp_num is None:
            return False
        return abs(pred_num - exp_num) < self.fuzzy_threshold

    def generate_report(
        self, result: BenchmarkResult, output_path: Path | None = None
    ) -> str:
        """Generate a human-readable benchmark report.

        Args:
            result: Benchmark results to format.
            output_path: Optional path to write the report file.

        Returns:
            Formatted report string.
        """
        m = result.metrics
        lines = [
            "=" * 60,
            "NUMBER EXTRACTION BENCHMARK",
            "=" * 60,
            f"Total Samples:        {result.total_samples}",
            f"Evaluated:            {result.evaluated_samples}",
            f"Precision:            {m.precision:.2%}",
            f"Recall:               {m.recall:.2%}",
            f"F1 Score:             {m.f1:.3f}",
            f"Exact-List Accuracy:  {m.accuracy:.2%}",
            f"Top-1 Accuracy:       {m.top1_accuracy:.2%}",
            f"Avg Extraction Time:  {result.avg_processing_time_ms:.2f}ms",
            "",
            "Per-Sample Metrics:",
            "-" * 60,
            f"{'Sample':<24} {'Precision':>10} {'Recall':>10} {'F1':>10}",
            "-" * 60,
        ]

        for name, metrics in sorted(result.sample_metrics.items()):
            lines.append(
                f"{name:<24} {metrics.precision:>10.2%} {metrics.recall:>10.2%} "
                f"{metrics.f1:>10.3f}"
            )
        lines.append("=" * 60)

        if result.errors:
            lines.append("")
            lines.append("Errors:")
            for error in result.errors:
                lines.append(f"  - {error}")

        report = "\n".join(lines)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w") as f:
                f.write(report)
            logger.info("Report written to %s", output_path)

        return report


def load_ground_truth(path: Path) -> dict[str, dict[str, object]]:
    """Load labeled samples from a JSON or CSV file.

    JSON format: ``{"name": {"text": "...", "expected": ["...", ...]}, ...}``
    CSV format: ``name,text,expected`` rows with ``|``-separated tokens.

    Args:
        path: Path to the ground truth file.

    Returns:
        Mapping of sample name to ``text`` and ``expected`` tokens.

    Raises:
        ValueError: If the file format is not supported.
    """
    if path.suffix == ".json":
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    if path.suffix == ".csv":
        gt: dict[str, dict[str, object]] = {}
        with open(path, encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                expected = row.get("expected") or ""
                gt[row["name"]] = {
                    "text": row.get("text") or "",
                    "expected": [t for t in expected.split("|") if t],
                }
        return gt

    raise ValueError(f"Unsupported ground truth format: {path.suffix}")
