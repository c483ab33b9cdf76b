"""Model helpers: statuses, SQL LIKE patterns, JSON SQL fragments and connection strings."""