from .source import STDIN, git_diff, git_diff_command, obtain_diff, read_diff_file

__all__ = ["STDIN", "git_diff", "git_diff_command", "obtain_diff", "read_diff_file"]
