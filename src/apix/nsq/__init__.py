"""
NSQ 模块

- client: 生产者与订阅
- service: 本地守护进程启动
"""

from apix.nsq.client import Client, Handler, HandlerFunc, Subscription
from apix.nsq.errors import NSQError
from apix.nsq.service import (
    Daemon,
    LookupdOptions,
    NsqadminOptions,
    NsqdOptions,
    new_lookupd_options,
    new_nsqadmin_options,
    new_nsqd_options,
    start_nsqadmin,
    start_nsqd,
    start_nsqlookupd,
)

__all__ = [
    "Client",
    "Daemon",
    "Handler",
    "HandlerFunc",
    "LookupdOptions",
    "NSQError",
    "NsqadminOptions",
    "NsqdOptions",
    "Subscription",
    "new_lookupd_options",
    "new_nsqadmin_options",
    "new_nsqd_options",
    "start_nsqadmin",
    "start_nsqd",
    "start_nsqlookupd",
]
