"""Shared test fixtures for nbscript."""

import json

import pytest


def markdown(source):
    return {"cell_type": "markdown", "metadata": {}, "source": source}


def code(source):
    return {"cell_type": "code", "metadata": {}, "execution_count": None,
            "outputs": [], "source": source}


def raw(source):
    return {"cell_type": "raw", "metadata": {}, "source": source}


@pytest.fixture
def sample_notebook():
    return {
        "cells": [
            markdown(["# Analysis\n", "\n", "Load the data first."]),
            code(["import pandas as pd\n", "%matplotlib inline\n", "df = pd.read_csv('x.csv')"]),
            raw("not part of the script"),
            markdown("## Plot"),
            code("df.plot()\n!ls data"),
        ],
        "metadata": {"kernelspec": {"name": "python3"}},
        "nbformat": 4,
        "nbformat_minor": 5,
    }


@pytest.fixture
def write_notebook(tmp_path):
    """Write a notebook payload (dict or raw text) under tmp_path and return its path."""
    def _write(content, name="analysis.ipynb"):
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path
    return _write
