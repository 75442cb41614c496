"""Setup configuration for picsim package"""

from setuptools import setup, find_packages

setup(
    name="picsim",
    version="0.1.0",
    author="picsim Development Team",
    description="Simulations of PIC plot patterns from single and paired causal variants between haplotype blocks",
    long_description=open("README.md").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["picsim", "picsim.*"]),
    install_requires=[
        "numpy>=1.19.0",
        "scipy>=1.6.0",
        "pandas>=1.2.0",
        "matplotlib>=3.3.0",
        "seaborn>=0.11.0",
    ],
    extras_require={
        # Independent OLS reference used by the test suite
        "test": [
            "pytest>=6.0",
            "statsmodels>=0.12.0",
        ],
    },
    python_requires=">=3.7",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
    ],
)
