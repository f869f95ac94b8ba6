# commands/ - Discord slash commands and views
