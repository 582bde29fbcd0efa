from setuptools import setup, find_packages

setup(
    name="plannerate",
    version="0.1.0",
    packages=find_packages(include=["plannerate", "plannerate.*"]),
    install_requires=[
        "pandas>=1.3.0",
        "numpy>=1.21.0",
        "psutil>=5.8.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.7",
)
