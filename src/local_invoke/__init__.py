"""Local emulator for the Lambda Invoke API, driven by serverless.yml"""
__version__ = "0.1.0"
