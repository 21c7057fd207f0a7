import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name='sklearn_concept',
    version='0.0',
    packages=setuptools.find_packages(),
    license='BSD',
    author='Jonathan Biegert',
    author_email='azrdev@qrdn.de',
    description='Implementation of *Current-Best* and *Version-Space* '
                'concept learning for scikit-learn.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires='>=3.6',
    install_requires=[
        'scikit_learn >= 0.20',
        'numpy',
    ],
    extras_require={
        'tests': ['matplotlib', 'pytest >= 3.5'],
    },
)
