#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Runner for the sentiment lasso experiment.

Run from project root after `pip install -e .`, e.g.:
    python run_experiment.py --csv data/sentences.csv --selection-rule best-metric
"""

import sys

from sentiment_lasso.experiments.experimental_pipeline import main

if __name__ == "__main__":
    sys.exit(main())
