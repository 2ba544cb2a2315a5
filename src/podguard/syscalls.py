"""Syscall name registry — static table of Linux syscall names.

Used to validate observed syscall telemetry before it lands in a seccomp
profile, and to drive autocomplete in editors. No I/O: the table is a
frozenset built at import time.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Known syscall names, grouped by subsystem.
# Covers the x86_64, i386 and ARM tables plus obsolete names that still show
# up in telemetry from older kernels.
# ---------------------------------------------------------------------------

_PROCESS = (
    "fork vfork clone clone3 execve execveat exit exit_group wait4 waitid "
    "getpid gettid getppid getpgid setpgid getpgrp setsid getsid getuid setuid "
    "getgid setgid geteuid getegid setreuid setregid getresuid getresgid "
    "setresuid setresgid getgroups setgroups capget capset prctl arch_prctl "
    "setns unshare pidfd_open pidfd_send_signal pidfd_getfd"
)

_MEMORY = (
    "brk mmap mmap2 munmap mremap mprotect madvise mlock mlock2 munlock "
    "mlockall munlockall mincore msync remap_file_pages memfd_create "
    "memfd_secret mbind get_mempolicy set_mempolicy migrate_pages "
    "move_pages pkey_alloc pkey_free pkey_mprotect"
)

_FILES = (
    "read write open openat openat2 close close_range creat link linkat unlink "
    "unlinkat symlink symlinkat readlink readlinkat chmod fchmod fchmodat chown "
    "fchown lchown fchownat umask access faccessat faccessat2 stat fstat lstat "
    "fstatat statx readv writev pread pread64 pwrite pwrite64 preadv preadv2 "
    "pwritev pwritev2 lseek dup dup2 dup3 fcntl ioctl flock fsync fdatasync "
    "sync sync_file_range syncfs truncate ftruncate fallocate fadvise64 "
    "sendfile sendfile64 splice tee vmsplice copy_file_range name_to_handle_at "
    "open_by_handle_at"
)

_DIRECTORIES = (
    "getcwd chdir fchdir chroot mkdir mkdirat rmdir rename renameat renameat2 "
    "getdents getdents64 lookup_dcookie"
)

_FILESYSTEMS = (
    "mount umount umount2 pivot_root statfs fstatfs ustat quotactl fsopen "
    "fsconfig fsmount fspick move_mount open_tree mount_setattr quotactl_fd"
)

_MULTIPLEXING = (
    "select pselect6 poll ppoll epoll_create epoll_create1 epoll_ctl "
    "epoll_wait epoll_pwait epoll_pwait2"
)

_SOCKETS = (
    "socket socketpair bind listen accept accept4 connect getsockname "
    "getpeername send sendto sendmsg sendmmsg recv recvfrom recvmsg recvmmsg "
    "shutdown setsockopt getsockopt socketcall"
)

_SIGNALS = (
    "kill tkill tgkill signal sigaction rt_sigaction sigprocmask "
    "rt_sigprocmask sigpending rt_sigpending sigsuspend rt_sigsuspend "
    "sigaltstack rt_sigtimedwait rt_sigqueueinfo rt_tgsigqueueinfo "
    "rt_sigreturn restart_syscall pause signalfd signalfd4"
)

_TIME = (
    "time gettimeofday settimeofday clock_gettime clock_settime clock_getres "
    "clock_nanosleep clock_adjtime adjtimex times nanosleep alarm setitimer "
    "getitimer timer_create timer_settime timer_gettime timer_getoverrun "
    "timer_delete timerfd_create timerfd_settime timerfd_gettime"
)

_SCHEDULING = (
    "sched_setparam sched_getparam sched_setscheduler sched_getscheduler "
    "sched_get_priority_max sched_get_priority_min sched_rr_get_interval "
    "sched_yield sched_setaffinity sched_getaffinity sched_setattr "
    "sched_getattr getpriority setpriority ioprio_set ioprio_get"
)

_SYSTEM = (
    "uname sysinfo syslog klogctl personality getrlimit setrlimit prlimit64 "
    "getrusage sysfs sethostname setdomainname gethostname getdomainname "
    "setfsuid setfsgid reboot acct seccomp ptrace getrandom bpf "
    "perf_event_open set_mempolicy_home_node process_vm_readv "
    "process_vm_writev process_madvise process_mrelease"
)

_XATTRS = (
    "setxattr lsetxattr fsetxattr getxattr lgetxattr fgetxattr listxattr "
    "llistxattr flistxattr removexattr lremovexattr fremovexattr"
)

_ASYNC_IO = (
    "io_setup io_destroy io_submit io_cancel io_getevents io_pgetevents "
    "io_uring_setup io_uring_enter io_uring_register futex futex_waitv "
    "set_robust_list get_robust_list"
)

_IPC = (
    "mq_open mq_unlink mq_timedsend mq_timedreceive mq_notify mq_getsetattr "
    "semget semop semctl semtimedop shmget shmat shmdt shmctl msgget msgsnd "
    "msgrcv msgctl ipc pipe pipe2"
)

_NOTIFY_AND_KEYS = (
    "inotify_init inotify_init1 inotify_add_watch inotify_rm_watch "
    "fanotify_init fanotify_mark add_key request_key keyctl init_module "
    "finit_module delete_module landlock_create_ruleset landlock_add_rule "
    "landlock_restrict_self"
)

_MISC = (
    "utrace vhangup uselib kcmp swapon swapoff readahead modify_ldt ioperm "
    "iopl vm86 vm86old breakpoint cacheflush set_tls usr26 usr32"
)

_THREADS_AND_EVENTS = (
    "set_tid_address set_thread_area get_thread_area rseq membarrier getcpu "
    "eventfd eventfd2 userfaultfd epoll_ctl_old epoll_wait_old futex_wake "
    "futex_wait futex_requeue map_shadow_stack uretprobe"
)

_FILES_EXTRA = (
    "newfstatat fchmodat2 mknod mknodat utime utimes utimensat futimesat "
    "cachestat mseal statmount listmount setxattrat getxattrat listxattrat "
    "removexattrat open_tree_attr kexec_load kexec_file_load "
    "lsm_get_self_attr lsm_set_self_attr lsm_list_modules tuxcall security"
)

# 32-bit entry points (i386, ARM) with their 16-bit uid and time64 variants.
_COMPAT32 = (
    "waitpid nice stime ftime prof gtty stty lock mpx ulimit ssetmask "
    "sgetmask sigreturn readdir profil _llseek _newselect ugetrlimit "
    "chown32 lchown32 fchown32 getuid32 getgid32 geteuid32 getegid32 "
    "setuid32 setgid32 setreuid32 setregid32 getgroups32 setgroups32 "
    "setresuid32 getresuid32 setresgid32 getresgid32 setfsuid32 setfsgid32 "
    "truncate64 ftruncate64 stat64 lstat64 fstat64 fstatat64 fcntl64 "
    "statfs64 fstatfs64 fadvise64_64 arm_fadvise64_64 sync_file_range2 "
    "arm_sync_file_range pciconfig_iobase pciconfig_read pciconfig_write "
    "clock_gettime64 clock_settime64 clock_adjtime64 clock_getres_time64 "
    "clock_nanosleep_time64 timer_gettime64 timer_settime64 "
    "timerfd_gettime64 timerfd_settime64 utimensat_time64 pselect6_time64 "
    "ppoll_time64 io_pgetevents_time64 recvmmsg_time64 "
    "mq_timedsend_time64 mq_timedreceive_time64 semtimedop_time64 "
    "rt_sigtimedwait_time64 futex_time64 sched_rr_get_interval_time64"
)

_OBSOLETE = (
    "oldolduname olduname oldstat oldlstat oldfstat _sysctl create_module "
    "query_module get_kernel_syms afs_syscall nfsservctl getpmsg putpmsg "
    "vserver idle sysctl bdflush"
)

VALID_SYSCALLS: frozenset[str] = frozenset(
    " ".join(
        (
            _PROCESS,
            _MEMORY,
            _FILES,
            _DIRECTORIES,
            _FILESYSTEMS,
            _MULTIPLEXING,
            _SOCKETS,
            _SIGNALS,
            _TIME,
            _SCHEDULING,
            _SYSTEM,
            _XATTRS,
            _ASYNC_IO,
            _IPC,
            _NOTIFY_AND_KEYS,
            _MISC,
            _THREADS_AND_EVENTS,
            _FILES_EXTRA,
            _COMPAT32,
            _OBSOLETE,
        )
    ).split()
)

_SORTED_SYSCALLS: tuple[str, ...] = tuple(sorted(VALID_SYSCALLS))


@dataclass(frozen=True)
class ParsedSyscalls:
    """Result of splitting a comma-separated syscall list."""

    valid: tuple[str, ...] = ()
    invalid: tuple[str, ...] = ()


def is_valid(name: str) -> bool:
    """Whether *name* is a known syscall (whitespace and case are ignored)."""
    return name.strip().lower() in VALID_SYSCALLS


def filter_valid(names: Iterable[str]) -> list[str]:
    """Keep only the known syscall names, in their original order."""
    return [name for name in names if is_valid(name)]


def suggest(partial: str, limit: int = 10) -> list[str]:
    """Suggest syscall names for a partial input.

    Prefix matches come first, then names that merely contain *partial*.
    Each group is sorted; the combined list is capped at *limit*.
    """
    needle = partial.strip().lower()
    if not needle or limit <= 0:
        return []

    prefix = [s for s in _SORTED_SYSCALLS if s.startswith(needle)]
    if len(prefix) >= limit:
        return prefix[:limit]

    contains = [
        s for s in _SORTED_SYSCALLS if needle in s and not s.startswith(needle)
    ]
    return (prefix + contains)[:limit]


def parse(raw: str) -> ParsedSyscalls:
    """Split a comma-separated syscall string into valid and invalid names.

    Valid names are trimmed and lower-cased. Invalid names are reported
    trimmed but otherwise verbatim so callers can surface them.
    """
    valid: list[str] = []
    invalid: list[str] = []

    for part in raw.split(","):
        name = part.strip()
        if not name:
            continue
        if is_valid(name):
            valid.append(name.lower())
        else:
            invalid.append(name)

    return ParsedSyscalls(valid=tuple(valid), invalid=tuple(invalid))
