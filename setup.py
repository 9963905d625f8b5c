"""
Flask-AMQPKit
-------------

Helpers for working with RabbitMQ from Flask applications:

  1. Create channels, either plain or "managed" (automatically
     reconnecting).

  2. Consume messages from queues, using a pool of worker threads,
     and publish messages with delivery confirmations.

  3. Parse received messages (JSON, optionally validated with
     marshmallow schemas), and acknowledge or reject them depending
     on the outcome of their handling.

The connection settings are read from the Flask app configuration,
and the ``flask amqp`` command group allows consuming and publishing
messages from the command line.
"""

import sys
from setuptools import setup

needs_pytest = {'pytest', 'test', 'ptr'}.intersection(sys.argv)
pytest_runner = ['pytest-runner'] if needs_pytest else []

tests_require = [
    'pytest>=6.2',
    'pytest-cov>=2.7',
    'mock>=2.0',
]


setup(
    name='Flask-AMQPKit',
    version='0.1.0',
    license='MIT',
    description='Helpers for creating RabbitMQ channels, consuming, publishing, and parsing messages',
    long_description=__doc__,
    packages=['flask_amqpkit'],
    zip_safe=True,
    platforms='any',
    setup_requires=pytest_runner,
    install_requires=[
        'Flask>=2.2',
        'blinker>=1.6',
        'marshmallow>=3.0',
        'pika~=1.3',
        'Werkzeug>=2.2',
    ],
    tests_require=tests_require,
    extras_require={
        'test': tests_require,
    },
    classifiers=[
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Topic :: System :: Networking',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ]
)
