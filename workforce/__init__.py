"""
Workforce timesheet and expense backend.

Layout:
- Entry Point: lambda_function routes API Gateway and scheduled events
- Handlers: Parse and validate input, map errors to HTTP responses
- Services: Business logic and orchestration
- Models: Data access layer (DynamoDB)
- Core: week, totals, overtime, aggregation, lifecycle (pure functions)
"""

__version__ = "1.0.0"
