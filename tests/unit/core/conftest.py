"""Shared fixtures for core unit tests"""

import pytest

from podthread.core.converter import ThreadConverter
from podthread.core.models import ThreadOptions


SAMPLE_POD = """\
=head1 NAME

foo - Some description of foo

=head1 DESCRIPTION

This is B<foo>, a program that does I<things> with F</etc/foo.conf>.

=head1 OPTIONS

=over 4

=item B<--help>

Print usage and exit.

=back

=head1 SEE ALSO

L<bar(1)>, L</OPTIONS>

=head1 AUTHOR

Someone.

=cut
"""

@pytest.fixture(name="convert")
def convert_fixture():
    """Convert POD text to thread with the given options."""
    def _convert(pod: str, anchors: dict = None, **options) -> str:
        return ThreadConverter(ThreadOptions(**options), anchors=anchors).convert_string(pod)
    return _convert


@pytest.fixture(name="sample_pod")
def sample_pod_fixture():
    return SAMPLE_POD


@pytest.fixture(name="sample_file")
def sample_file_fixture(tmp_path):
    path = tmp_path / "foo.pod"
    path.write_text(SAMPLE_POD)
    return path
