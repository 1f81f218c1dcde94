#!/usr/bin/env python3
"""
通知目录示例

演示如何定义一个通知目录、订阅其中的变体并发布类型化通知，
以及名称与期望类型不符时在订阅那一刻就会失败。
"""
from datetime import datetime

from typed_notifications import (
    NotificationEnum,
    NotificationSubscriptionManager,
    PayloadTypeMismatchError,
    TypedNotificationCenter,
    get_logger,
)

logger = get_logger("examples.app_notifications")


class AppNotifications(NotificationEnum):
    """应用生命周期通知，目录的定义集中在一处"""


class AppHasLaunched(AppNotifications):
    launch_date: datetime


class AppDownloadedData(AppNotifications):
    title: str
    index: int


class AppWillCrash(AppNotifications):
    error: Exception


AppNotifications.seal()


class MaintenanceNotifications(NotificationEnum):
    pass


class SomethingIsWrong(MaintenanceNotifications):
    pass


class DownloadMonitor:
    """订阅下载通知的消费者"""

    def __init__(self, center: TypedNotificationCenter):
        self.subscriptions = NotificationSubscriptionManager(center, owner_name="download-monitor")
        self.subscriptions.register_handlers({
            AppDownloadedData: self.on_downloaded,
            AppWillCrash: self.on_crash,
        })
        self.subscriptions.setup_subscriptions()

    def on_downloaded(self, notification: AppDownloadedData, sender) -> None:
        logger.info(f"title: {notification.title}, index: {notification.index}")

    def on_crash(self, notification: AppWillCrash, sender) -> None:
        logger.warning(f"应用即将崩溃: {notification.error}")

    def close(self) -> None:
        self.subscriptions.clear_handlers()


def main():
    center = TypedNotificationCenter()

    monitor = DownloadMonitor(center)
    center.post(AppDownloadedData(title="Test", index=5))
    monitor.close()

    # 按名称订阅时必须声明期望的类型，类型不符在这里就会被发现
    try:
        center.add_observer(
            AppDownloadedData.notification_name,
            lambda notification, sender: None,
            expected=MaintenanceNotifications,
        )
    except PayloadTypeMismatchError as e:
        logger.error(f"订阅被拒绝: {e}")

    with center.add_observer(AppNotifications, lambda n, s: logger.info(f"收到 {n.notification_name}")):
        center.post(AppHasLaunched(launch_date=datetime.now()))


if __name__ == "__main__":
    main()
