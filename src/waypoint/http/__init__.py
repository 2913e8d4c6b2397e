"""HTTP value types: headers, query strings, responses."""
