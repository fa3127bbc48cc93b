"""
CBV Toolbox - Setup Configuration

Installation:
    pip install -e .

Or, with test tools:
    pip install -e ".[dev]"
"""

import os

from setuptools import setup, find_packages

long_description = ""
if os.path.exists("README.md"):
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()

setup(
    name="cbv-toolbox",
    version="1.0.0",
    author="CBV Toolbox Contributors",
    author_email="",
    description="Cerebral Blood Volume (CBV) baseline integral from DSC-MRI with Numba acceleration",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["cbv_toolbox", "cbv_toolbox.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
        "Topic :: Scientific/Engineering :: Image Processing",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20.0",
        "numba>=0.55.0",
        "nibabel>=3.2.0",
        "tqdm>=4.60.0",
        "pandas>=1.3.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=2.0",
            "scipy>=1.7.0",
            "black>=21.0",
            "flake8>=3.9",
        ],
    },
    include_package_data=True,
    keywords=[
        "perfusion MRI",
        "DSC",
        "CBV",
        "neuroimaging",
        "contrast bolus",
    ],
)
