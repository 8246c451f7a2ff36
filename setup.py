# /setup.py
"""
Setup configuration for dbctl.
"""
from setuptools import setup, find_packages
from pathlib import Path

# Read version from dbctl.py
with open(Path(__file__).parent / 'dbctl' / 'dbctl.py', 'r') as f:
    for line in f:
        if line.startswith('VERSION'):
            version = line.split('=')[1].strip().strip('"\'')
            break

# Read README
readme = Path(__file__).parent / 'README.md'
long_description = readme.read_text() if readme.exists() else ''

setup(
    name='dbctl',
    version=version,
    description='Manage a local PostgreSQL and pgAdmin compose project',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=find_packages(include=['dbctl', 'dbctl.*']),
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        'click>=8.1.7',
        'rich>=13.7.0',
        'pyyaml>=6.0.1',
        'python-dotenv>=1.0.0'
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0'
        ]
    },
    entry_points={
        'console_scripts': [
            'dbctl=dbctl.dbctl:main'
        ]
    },
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
    ],
)
