from setuptools import setup

def readme():
    with open('README.md') as f:
        return f.read()

setup(
    name='MAXPLANES',
    version='0.1.0',
    description='Decentralized Max-Sum Task Allocation for Fleets of Planes',
    long_description=readme(),
    long_description_content_type='text/markdown',
    packages=['maxplanes'],
    scripts=[],
    install_requires=['numpy', 'pandas', 'tqdm'],
    extras_require={'test' : ['pytest']}
)
