"""Daily task digest: fetch, render and deliver to Discord."""
