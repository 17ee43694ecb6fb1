"""
Visualization of LBP models and classification results.
"""
from pathlib import Path
from typing import List, Sequence

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns

from .models.lbp_model import LBPModel
from .utils import ensure_dir

sns.set_style("whitegrid")


def plot_model_histograms(model: LBPModel, output_path: Path,
                          title: str = "LBP Model Histograms",
                          dpi: int = 150) -> None:
    """
    Plot pattern and variance histograms of every resolution.

    Args:
        model: Trained model
        output_path: Output file path
        title: Plot title
        dpi: Output resolution
    """
    n_rows = len(model.sub_models)
    fig, axes = plt.subplots(n_rows, 2, figsize=(14, 3.5 * n_rows), squeeze=False)
    fig.suptitle(f"{title} ({model.image_count} image(s))", fontsize=14, fontweight='bold')

    for row, sub_model in zip(axes, model.sub_models):
        ax1, ax2 = row
        label = f"P={sub_model.p}, R={sub_model.r}"

        if sub_model.pattern_hist is not None:
            x_pos = np.arange(sub_model.p + 2)
            ax1.bar(x_pos, sub_model.pattern_hist, color='steelblue', alpha=0.7, edgecolor='black')
            ax1.set_xticks(x_pos)
            ax1.set_xticklabels([str(i) for i in range(sub_model.p + 1)] + ['non-uniform'],
                                rotation=45, fontsize=8)
        ax1.set_title(f'Pattern Histogram ({label})', fontsize=12)
        ax1.set_xlabel('LBP riu2 code', fontsize=11)
        ax1.set_ylabel('Probability', fontsize=11)
        ax1.grid(True, alpha=0.3, axis='y')

        if sub_model.b > 0 and sub_model.var_hist is not None:
            x_pos = np.arange(sub_model.b)
            ax2.bar(x_pos, sub_model.var_hist, color='darkorange', alpha=0.7, edgecolor='black')
            ax2.set_xticks(x_pos)
            ax2.set_title(f'Variance Histogram ({label}, B={sub_model.b})', fontsize=12)
            ax2.set_xlabel('log10(variance) bin', fontsize=11)
            ax2.set_ylabel('Probability', fontsize=11)
            ax2.grid(True, alpha=0.3, axis='y')
        else:
            ax2.axis('off')

    plt.tight_layout()
    ensure_dir(Path(output_path).parent)
    plt.savefig(output_path, dpi=dpi, bbox_inches='tight')
    plt.close()

    print(f"✓ Saved model histograms to {output_path}")


def plot_classification_scores(names: Sequence[str], scores: Sequence[float],
                               output_path: Path,
                               title: str = "Goodness-of-Fit per Model",
                               dpi: int = 150) -> None:
    """
    Bar chart of goodness-of-fit scores, best model highlighted.

    Args:
        names: Model names
        scores: Goodness-of-fit per model
        output_path: Output file path
        title: Plot title
        dpi: Output resolution
    """
    scores = np.asarray(scores, dtype=np.float64)
    best = int(np.argmax(scores))
    colors: List[str] = ['steelblue'] * len(scores)
    colors[best] = 'seagreen'

    fig, ax = plt.subplots(figsize=(max(6, len(scores) * 1.2), 5))
    x_pos = np.arange(len(scores))
    ax.bar(x_pos, scores, color=colors, alpha=0.8, edgecolor='black')
    ax.set_xticks(x_pos)
    ax.set_xticklabels(names, rotation=30, ha='right')
    ax.set_ylabel('Goodness-of-fit', fontsize=11)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3, axis='y')

    for x, score in zip(x_pos, scores):
        ax.text(x, score, f'{score:.4f}', ha='center',
                va='top' if score < 0 else 'bottom', fontsize=9)

    plt.tight_layout()
    ensure_dir(Path(output_path).parent)
    plt.savefig(output_path, dpi=dpi, bbox_inches='tight')
    plt.close()

    print(f"✓ Saved classification scores to {output_path}")
