"""
Recall Setup Script

Install with: pip install -e .
Tests: pip install -e ".[test]" && pytest
"""

from setuptools import setup, find_packages

setup(
    name='recall-retrieval',
    version='0.1.0',
    description='Hybrid vector + graph retrieval and ranking engine for personal assistant memories',
    author='Recall Team',
    packages=find_packages(include=['recall', 'recall.*']),
    package_data={
        'recall': ['config/*.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'pydantic>=2.5.0',
        'pyyaml>=6.0.1',
        'aiohttp>=3.9.0',
        'click>=8.1.0',
        'structlog>=23.1.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0',
            'pytest-asyncio>=0.21.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'recall-cli=recall.cli:cli',
        ],
    },
    python_requires='>=3.11',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
        'Topic :: Text Processing :: Indexing',
    ],
)
