# Created by Javad Komijani (2023)

"""This is the setup script for `torch_real_eig`."""

from setuptools import setup


def readme():
    """Reads and returns the contents of the README.md file."""
    with open('README.md', encoding='utf-8') as f:
        return f.read()


packages = [
        'torch_real_eig',
        'torch_real_eig._eig'
        ]

package_dir = {
        'torch_real_eig': 'src',
        'torch_real_eig._eig': 'src/_eig'
        }

setup(name='torch_real_eig',
      version='1.0.0',
      description="eigen decomposition of real square matrices with torch.",
      long_description=readme(),
      long_description_content_type='text/markdown',
      packages=packages,
      package_dir=package_dir,
      install_requires=['torch'],
      extras_require={'test': ['pytest', 'numpy']},
      python_requires='>=3.8',
      author='Javad Komijani',
      author_email='jkomijani@gmail.com',
      license='MIT',
      zip_safe=False
      )
