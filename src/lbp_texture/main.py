"""
Command line interface for training texture models and classifying images.

    lbp-texture -t modelfile imagefiles...
    lbp-texture -c modelfiles... imagefile
"""
import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pandas as pd
from tqdm import tqdm

from .exceptions import LBPError
from .feature_extraction.parameters import LBPParameters
from .models.lbp_model import LBPModel, best_index
from .utils import (collect_image_paths, config_section, image_generator, load_config,
                    parameters_from_config)

DEFAULT_CONFIG = 'config/config.yaml'


def train(model_file: Path,
          image_files: Sequence[Path],
          params: LBPParameters,
          plot_path: Optional[Path] = None,
          dpi: int = 150) -> LBPModel:
    """
    Train a model from image files and store it.

    Args:
        model_file: Output model file
        image_files: Training images (loaded one at a time)
        params: Parameters
        plot_path: Optional path for a histogram plot of the model
        dpi: Plot resolution

    Returns:
        Trained model
    """
    print(f"Training model with parameters {params} on {len(image_files)} image(s)")

    model = LBPModel(params)
    for image, _ in tqdm(image_generator(image_files), total=len(image_files), desc="Incorporating"):
        model.incorporate(image)

    model.save(model_file)
    print(f"✓ Saved model to {model_file}")

    if plot_path is not None:
        from .visualization import plot_model_histograms
        plot_model_histograms(model, plot_path, title=f"LBP Model {Path(model_file).name}", dpi=dpi)

    return model


def classify(model_files: Sequence[Path],
             image_file: Path,
             report_path: Optional[Path] = None,
             plot_path: Optional[Path] = None,
             dpi: int = 150) -> Tuple[int, List[float]]:
    """
    Classify an image against a set of stored models.

    The sample is built with the parameters of the first model.

    Args:
        model_files: Candidate model files
        image_file: Image to classify
        report_path: Optional CSV file for the scores
        plot_path: Optional path for a score bar chart
        dpi: Plot resolution

    Returns:
        Tuple of (index of best model, goodness-of-fit per model)
    """
    models = [LBPModel.load(f) for f in model_files]
    params = models[0].parameters

    sample = LBPModel(params)
    sample.incorporate_file(image_file)

    names = [Path(f).name for f in model_files]
    scores = sample.scores(models)
    for name, gof in zip(names, scores):
        print(f"{name}: {gof}")

    best = best_index(scores)
    print(f"Classified as {names[best]}")

    if report_path is not None:
        report = pd.DataFrame({
            'model': [str(f) for f in model_files],
            'score': scores,
            'best': [i == best for i in range(len(models))]
        })
        Path(report_path).parent.mkdir(parents=True, exist_ok=True)
        report.to_csv(report_path, index=False)
        print(f"✓ Saved classification report to {report_path}")

    if plot_path is not None:
        from .visualization import plot_classification_scores
        plot_classification_scores(names, scores, plot_path,
                                   title=f"Goodness-of-Fit for {Path(image_file).name}", dpi=dpi)

    return best, scores


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lbp-texture',
        description='Local Binary Pattern texture classifier',
        epilog='usage: lbp-texture -t modelfile imagefiles | lbp-texture -c modelfiles imagefile'
    )
    command = parser.add_mutually_exclusive_group(required=True)
    command.add_argument('-t', dest='command', action='store_const', const='train',
                         help='Train: first file is the model file, the rest are images')
    command.add_argument('-c', dest='command', action='store_const', const='classify',
                         help='Classify: last file is the image, the rest are models')
    parser.add_argument('files', nargs='*',
                        help='Model and image files')
    parser.add_argument('--config', type=str, default=DEFAULT_CONFIG,
                        help='Path to config.yaml (training parameters); a missing default file is skipped')
    parser.add_argument('--report', type=str, default=None,
                        help='Write classification scores to this CSV file')
    parser.add_argument('--plot', type=str, default=None,
                        help='Save model histograms (train) or scores (classify) as an image')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    if len(args.files) < 2:
        parser.error("Not enough arguments")

    config_path = Path(args.config)
    if not config_path.exists() and args.config != DEFAULT_CONFIG:
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    plot_path = Path(args.plot) if args.plot else None

    try:
        config = load_config(config_path)
        dpi = config_section(config, 'visualization').get('dpi', 150)

        if args.command == 'train':
            if args.report is not None:
                print("⚠️  --report is only used when classifying", file=sys.stderr)
            params = parameters_from_config(config)
            image_files = collect_image_paths(args.files[1:])
            if not image_files:
                parser.error("No image files given")
            train(Path(args.files[0]), image_files, params, plot_path=plot_path, dpi=dpi)
        else:
            model_files = [Path(f) for f in args.files[:-1]]
            report_path = Path(args.report) if args.report else None
            classify(model_files, Path(args.files[-1]),
                     report_path=report_path, plot_path=plot_path, dpi=dpi)
    except (LBPError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
