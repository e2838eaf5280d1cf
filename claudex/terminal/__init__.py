"""Terminal helpers: hyperlink detection, OSC 8 link wrapping and PTY proxying."""