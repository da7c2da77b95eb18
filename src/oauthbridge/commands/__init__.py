"""Built-in CLI sub-commands for oauthbridge."""
