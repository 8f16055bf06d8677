#!/usr/bin/env python3
"""
Command-line entry point for the clustering pipeline.

Usage:
    risk-clustering \
        --input-data=data/raw/claims.csv \
        --clustering-vars region product_type claim_amount \
        --display-vars age \
        --score-var=risk_score \
        --n-clusters=4 \
        --fraction=0.1 \
        --output=reports/top_risky_clusters.xlsx
"""
import argparse
import sys
from pathlib import Path

from risk_clustering.clustering import save_clustering_artifacts
from risk_clustering.config import load_config
from risk_clustering.data_loader import get_data_summary, load_dataset
from risk_clustering.errors import DegenerateColumn, InvalidInput
from risk_clustering.export import export_report
from risk_clustering.pipeline import run
from risk_clustering.plotting import plot_feature_correlations


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Cluster the top-scoring rows of a dataset and compare them with the population",
    )
    parser.add_argument("--input-data", type=str, required=True, help="CSV/TSV/TXT or parquet file")
    parser.add_argument("--sep", type=str, default=None, help="Delimiter for text files (sniffed by default)")
    parser.add_argument("--clustering-vars", nargs="+", required=True, help="Variables to cluster on")
    parser.add_argument("--display-vars", nargs="*", default=[], help="Variables shown in the report only")
    parser.add_argument("--score-var", type=str, required=True, help="Numeric column used to rank rows")
    parser.add_argument("--n-clusters", type=int, required=True, help="Number of clusters")

    selection = parser.add_mutually_exclusive_group(required=True)
    selection.add_argument("--n-rows", type=int, help="Number of top rows to cluster")
    selection.add_argument("--fraction", type=float, help="Share of top rows to cluster (0-1)")

    parser.add_argument("--no-scale", action="store_true", help="Skip feature standardization")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--output", type=str, default=None, help="Report .xlsx path")
    parser.add_argument("--template", type=str, default=None, help="Report template workbook")
    parser.add_argument("--labeled-output", type=str, default=None, help="Labeled rows (.csv or .parquet)")
    parser.add_argument("--plot", type=str, default=None, help="Feature correlation image path")
    parser.add_argument("--models-dir", type=str, default=None, help="Directory for model artifacts")
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    return parser


def main(argv=None) -> int:
    """Main entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    if args.quiet:
        config['verbose'] = False
    verbose = config['verbose']

    try:
        dataset = load_dataset(args.input_data, sep=args.sep, verbose=verbose)
        if verbose:
            summary = get_data_summary(dataset)
            print(f"  ✓ Missing values: {summary['missing_total']:,} | Memory: {summary['memory_mb']:.2f} MB")
        results = run(
            dataset,
            clustering_vars=args.clustering_vars,
            display_vars=args.display_vars,
            score_var=args.score_var,
            n_clusters=args.n_clusters,
            n_rows=args.n_rows,
            fraction=args.fraction,
            scale_data=not args.no_scale,
            config=config,
        )
    except (InvalidInput, DegenerateColumn) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2

    report = results['summary_report']

    if args.output:
        export_report(report, args.output, template_path=args.template, verbose=verbose)
    elif verbose:
        print("\n" + report.to_string(index=False))

    if args.labeled_output:
        labeled_path = Path(args.labeled_output)
        labeled_path.parent.mkdir(parents=True, exist_ok=True)
        if labeled_path.suffix.lower() == '.parquet':
            results['labeled_subset'].to_parquet(labeled_path)
        else:
            results['labeled_subset'].to_csv(labeled_path, index=False)
        if verbose:
            print(f"✓ Saved labeled rows to {labeled_path}")

    if args.plot:
        features = results['labeled_subset'][results['feature_columns']]
        plot_feature_correlations(
            features,
            args.plot,
            sample_size=config['plot_sample_size'],
            random_state=config['random_state'],
        )
        if verbose:
            print(f"✓ Saved plot to {args.plot}")

    if args.models_dir:
        save_clustering_artifacts(
            results['model'],
            results['scaler'],
            report,
            results['feature_columns'],
            results['label_mapping'],
            models_dir=args.models_dir,
            config=config,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
