import logging
from datetime import date
from pathlib import Path
from typing import Optional
from recompress.config.models import MIN_HEIGHT, MIN_WIDTH, QUALITY_MAX, QUALITY_MIN, JobConfiguration, SpeedPreset

MANPAGE_NAME = "recompress.1"

MANPAGE_TEMPLATE = r""".TH RECOMPRESS 1 "{date}" "recompress {version}" "User Commands"
.SH NAME
recompress \- re-encode video files to 10-bit HEVC
.SH SYNOPSIS
.B recompress
[\fIOPTIONS\fR] [\fB\-\-\fR] \fIFILE\fR...
.SH DESCRIPTION
For every \fIFILE\fR, in order, \fBrecompress\fR probes the first video stream
with \fBffprobe\fR. Files that are already HEVC are skipped unless
\fB\-\-force\fR is given. Everything else is re-encoded with \fBffmpeg\fR and
libx265 (yuv420p10le, tag hvc1), scaled down to fit within the maximum width
and height while keeping the aspect ratio. Audio, subtitle, data, attachment
streams and chapters are copied unchanged.
.PP
Output is written to \fI_recompressed/_working/\fR and moved to
\fI_recompressed/\fR once the encode succeeded. Failed encodes leave nothing
behind. Empty directories are removed after each file.
.SH OPTIONS
.TP
.BR \-f ", " \-\-force
Re-encode files that are already HEVC.
.TP
.BR \-q ", " \-\-quality " " \fIN\fR
CRF value between {quality_min} and {quality_max}; lower is better quality. Default {quality}.
.TP
.BR \-s ", " \-\-speed " " \fIPRESET\fR
One of {presets}. Default {speed}.
.TP
.BR \-x ", " \-\-width " " \fIPIXELS\fR
Maximum output width, at least {min_width}. Default {max_width}.
.TP
.BR \-y ", " \-\-height " " \fIPIXELS\fR
Maximum output height, at least {min_height}. Default {max_height}.
.TP
.BR \-M ", " \-\-installmanpage
Install this manual page and exit.
.TP
.BR \-h ", " \-\-help
Show a short help text and exit.
.TP
.B \-\-
End of options; everything after is a file name.
.SH FILES
.TP
.I ~/.config/recompress/recompress.yaml
Optional defaults, under a \fBgeneral:\fR key.
.SH EXIT STATUS
0 when the batch ran, even if some files were skipped or failed.
1 on a fatal error: missing ffmpeg/ffprobe, an invalid option value, an
unknown option or no input files.
"""

def default_man_dir() -> Path:
    return Path.home() / ".local" / "share" / "man" / "man1"

def render_manpage(version: str = "0.1.0") -> str:
    defaults = JobConfiguration(cpu_count=1)
    return MANPAGE_TEMPLATE.format(
        date=date.today().isoformat(),
        version=version,
        quality_min=QUALITY_MIN,
        quality_max=QUALITY_MAX,
        quality=defaults.quality,
        presets=", ".join(SpeedPreset.names()),
        speed=defaults.speed.value,
        min_width=MIN_WIDTH,
        max_width=defaults.max_width,
        min_height=MIN_HEIGHT,
        max_height=defaults.max_height,
    )

def install_manpage(man_dir: Optional[Path] = None, version: str = "0.1.0") -> Path:
    target_dir = man_dir or default_man_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / MANPAGE_NAME
    target.write_text(render_manpage(version))
    logging.getLogger(__name__).info(f"Installed manpage {target}")
    return target
