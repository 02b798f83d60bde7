from setuptools import setup, find_packages

setup(
    name="erk_propulsion_srn",
    version="0.1.0",
    description="Per-cell stochastic ERK/self-propulsion reaction network for agent-based cell simulations",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["alignment_sweep_script"],
    install_requires=[
        "numpy>=1.20.0",
        "numba>=0.53.0",
        "pandas>=1.3.0",
        "typing-extensions>=4.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    python_requires=">=3.8",
)
